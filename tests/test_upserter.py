"""
Tests for the Upserter delivery orchestrator.

Tests cover:
- Per-record delivery posts one document per call
- Bulk delivery posts arrays of batch_size documents
- Failed units become failed outcomes without stopping the others
- Total failure raises (or not, per options)
- AuthError is a run-level failure
- Empty input makes no calls
"""

from dataclasses import dataclass
from unittest.mock import AsyncMock, MagicMock

import pytest

from catalog_sync.clients.crm_client import CrmResponse
from catalog_sync.config import SyncOptions
from catalog_sync.delivery.retry import RetryExecutor
from catalog_sync.delivery.upserter import Upserter
from catalog_sync.errors import AuthError, TotalFailureError, TransportError

URL = 'https://crm.example.com/services/apexrest/ProductUpsertAPI'


@dataclass
class Doc:
    code: str

    def to_payload(self):
        return {'Code': self.code}


def _identify(doc):
    return doc.code


def _serialize(doc):
    return doc.to_payload()


def _make_client(post_json) -> MagicMock:
    client = MagicMock()
    client.tokens.get_credential = AsyncMock()
    client.post_json = AsyncMock(side_effect=post_json)
    return client


def _make_upserter(client, **overrides) -> Upserter:
    options = SyncOptions(**{'retry_base_delay': 0, **overrides})
    retry = RetryExecutor(
        max_attempts=options.max_attempts,
        base_delay=0,
        sleep=AsyncMock(),
    )
    return Upserter(client, options, retry=retry)


async def _always_ok(url, body):
    return CrmResponse(status_code=200, body={'success': True})


class TestPerRecordDelivery:
    @pytest.mark.asyncio
    async def test_one_call_per_document(self):
        client = _make_client(_always_ok)
        upserter = _make_upserter(client)
        docs = [Doc('A'), Doc('B'), Doc('C')]

        summary = await upserter.deliver(URL, docs, identify=_identify, serialize=_serialize)

        assert summary.success_count == 3
        assert summary.failed_count == 0
        assert client.post_json.await_count == 3
        payloads = sorted(c.args[1]['Code'] for c in client.post_json.await_args_list)
        assert payloads == ['A', 'B', 'C']
        assert [o.identifiers for o in summary.batches] == [('A',), ('B',), ('C',)]

    @pytest.mark.asyncio
    async def test_failed_document_isolated(self):
        async def post_json(url, body):
            if body['Code'] == 'B':
                raise TransportError('HTTP 500', status_code=500)
            return CrmResponse(status_code=200, body=None)

        client = _make_client(post_json)
        upserter = _make_upserter(client, max_attempts=3)

        summary = await upserter.deliver(
            URL,
            [Doc('A'), Doc('B'), Doc('C')],
            identify=_identify,
            serialize=_serialize,
        )

        assert summary.success_count == 2
        assert summary.failed_count == 1
        assert summary.failed_identifiers == ['B']
        failed = summary.batches[1]
        assert not failed.success
        assert failed.status_code == 500
        assert failed.attempts == 3
        # B retried to budget; A and C once each
        assert client.post_json.await_count == 5

    @pytest.mark.asyncio
    async def test_retry_recovers(self):
        calls = {'n': 0}

        async def post_json(url, body):
            calls['n'] += 1
            if calls['n'] == 1:
                raise TransportError('timeout')
            return CrmResponse(status_code=200, body=None)

        client = _make_client(post_json)
        upserter = _make_upserter(client, concurrency=1)

        summary = await upserter.deliver(URL, [Doc('A')], identify=_identify, serialize=_serialize)

        assert summary.success_count == 1
        assert client.post_json.await_count == 2


class TestBulkDelivery:
    @pytest.mark.asyncio
    async def test_batches_of_batch_size(self):
        client = _make_client(_always_ok)
        upserter = _make_upserter(client, batch_size=2)
        docs = [Doc(str(i)) for i in range(5)]

        summary = await upserter.deliver(
            URL, docs, identify=_identify, serialize=_serialize, bulk=True
        )

        assert client.post_json.await_count == 3
        sizes = sorted(len(c.args[1]) for c in client.post_json.await_args_list)
        assert sizes == [1, 2, 2]
        assert summary.success_count == 5
        assert [o.size for o in summary.batches] == [2, 2, 1]

    @pytest.mark.asyncio
    async def test_failed_batch_counts_every_document(self):
        async def post_json(url, body):
            if body[0]['Code'] == '2':
                raise TransportError('HTTP 400', status_code=400)
            return CrmResponse(status_code=200, body=None)

        client = _make_client(post_json)
        upserter = _make_upserter(client, batch_size=2, max_attempts=1)

        summary = await upserter.deliver(
            URL,
            [Doc(str(i)) for i in range(5)],
            identify=_identify,
            serialize=_serialize,
            bulk=True,
        )

        assert summary.success_count == 3
        assert summary.failed_count == 2
        assert summary.failed_identifiers == ['2', '3']


class TestRunLevelFailures:
    @pytest.mark.asyncio
    async def test_total_failure_raises(self):
        async def post_json(url, body):
            raise TransportError('HTTP 503', status_code=503)

        upserter = _make_upserter(_make_client(post_json), max_attempts=2)

        with pytest.raises(TotalFailureError) as exc_info:
            await upserter.deliver(URL, [Doc('A'), Doc('B')], identify=_identify, serialize=_serialize)

        assert exc_info.value.summary.failed_identifiers == ['A', 'B']

    @pytest.mark.asyncio
    async def test_total_failure_returned_when_policy_off(self):
        async def post_json(url, body):
            raise TransportError('HTTP 503', status_code=503)

        upserter = _make_upserter(
            _make_client(post_json), max_attempts=1, raise_on_total_failure=False
        )

        summary = await upserter.deliver(URL, [Doc('A')], identify=_identify, serialize=_serialize)

        assert summary.all_failed

    @pytest.mark.asyncio
    async def test_per_call_override_skips_total_failure(self):
        async def post_json(url, body):
            raise TransportError('HTTP 503', status_code=503)

        upserter = _make_upserter(_make_client(post_json), max_attempts=1)

        summary = await upserter.deliver(
            URL,
            [Doc('A')],
            identify=_identify,
            serialize=_serialize,
            raise_on_total_failure=False,
        )

        assert summary.failed_identifiers == ['A']

    @pytest.mark.asyncio
    async def test_credential_failure_before_delivery(self):
        client = _make_client(_always_ok)
        client.tokens.get_credential = AsyncMock(side_effect=AuthError('no token'))
        upserter = _make_upserter(client)

        with pytest.raises(AuthError):
            await upserter.deliver(URL, [Doc('A')], identify=_identify, serialize=_serialize)

        client.post_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_auth_error_during_delivery_propagates(self):
        async def post_json(url, body):
            raise AuthError('token refresh failed')

        upserter = _make_upserter(_make_client(post_json))

        with pytest.raises(AuthError):
            await upserter.deliver(URL, [Doc('A'), Doc('B')], identify=_identify, serialize=_serialize)

    @pytest.mark.asyncio
    async def test_empty_input_makes_no_calls(self):
        client = _make_client(_always_ok)
        upserter = _make_upserter(client)

        summary = await upserter.deliver(URL, [], identify=_identify, serialize=_serialize)

        assert summary.unit_count == 0
        client.tokens.get_credential.assert_not_awaited()
        client.post_json.assert_not_awaited()
