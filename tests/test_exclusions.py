"""
Tests for node drain/fill via allocation exclusion rules.

These tests verify the ExclusionManager correctly:
- Decodes empty exclusion strings to empty lists
- Appends on drain and removes on fill, sending the flat single-key body
- Clears every category with one nested write on fill_all
- Surfaces failures instead of reporting a drained node
"""

import pytest

from operator_elasticsearch.errors import BadStatusError, MalformedResponseError
from operator_elasticsearch.exclusions import EXCLUDE_NAME_KEY, ExclusionManager
from operator_elasticsearch.models import ExclusionSettings

SETTINGS = ("GET", "/_cluster/settings")
PUT_SETTINGS = ("PUT", "/_cluster/settings")


def _exclude_response(**exclude):
    return {"json": {
        "persistent": {},
        "transient": {"cluster": {"routing": {"allocation": {"exclude": exclude}}}},
    }}


@pytest.fixture
def manager_for(make_client):
    """Build an ExclusionManager over canned responses."""

    def _make(responses):
        client, transport = make_client(responses)
        return ExclusionManager(reader=client, store=client), transport

    return _make


class TestRead:
    """Tests for ExclusionManager.read()."""

    @pytest.mark.asyncio
    async def test_reads_all_categories(self, manager_for):
        manager, _ = manager_for({SETTINGS: _exclude_response(
            _host="excluded.host", _name="excluded_name", _ip="10.0.0.99",
        )})

        settings = await manager.read()

        assert settings == ExclusionSettings(
            names=["excluded_name"], ips=["10.0.0.99"], hosts=["excluded.host"]
        )

    @pytest.mark.asyncio
    async def test_empty_strings_decode_to_empty_lists(self, manager_for):
        manager, _ = manager_for({SETTINGS: _exclude_response(_host="", _name="", _ip="")})

        settings = await manager.read()

        assert settings.names == []
        assert settings.ips == []
        assert settings.hosts == []

    @pytest.mark.asyncio
    async def test_unset_categories_decode_to_empty_lists(self, manager_for):
        manager, _ = manager_for({SETTINGS: {"json": {"persistent": {}, "transient": {}}}})

        assert await manager.read() == ExclusionSettings()

    @pytest.mark.asyncio
    async def test_flat_transient_form_is_read(self, manager_for):
        manager, _ = manager_for({SETTINGS: {"json": {
            "persistent": {},
            "transient": {"cluster.routing.allocation.exclude._name": "a,b"},
        }}})

        assert (await manager.read()).names == ["a", "b"]

    @pytest.mark.asyncio
    async def test_missing_transient_is_malformed(self, manager_for):
        manager, _ = manager_for({SETTINGS: {"json": {"persistent": {}}}})

        with pytest.raises(MalformedResponseError):
            await manager.read()


class TestDrain:
    """Tests for ExclusionManager.drain()."""

    @pytest.mark.asyncio
    async def test_drain_one_value(self, manager_for):
        manager, transport = manager_for({
            SETTINGS: _exclude_response(_name=""),
            PUT_SETTINGS: _exclude_response(_name="server_to_drain"),
        })

        settings = await manager.drain("server_to_drain")

        assert transport.sent_bodies() == [
            {"transient": {"cluster.routing.allocation.exclude._name": "server_to_drain"}}
        ]
        assert settings.names == ["server_to_drain"]

    @pytest.mark.asyncio
    async def test_drain_appends_to_existing_values(self, manager_for):
        manager, transport = manager_for({
            SETTINGS: _exclude_response(_name="existing_one,existing_two"),
            PUT_SETTINGS: _exclude_response(_name="existing_one,existing_two,server_to_drain"),
        })

        settings = await manager.drain("server_to_drain")

        body = transport.sent_bodies()[0]
        assert body["transient"][EXCLUDE_NAME_KEY] == "existing_one,existing_two,server_to_drain"
        assert settings.names == ["existing_one", "existing_two", "server_to_drain"]

    @pytest.mark.asyncio
    async def test_drain_keeps_ips_and_hosts_from_read(self, manager_for):
        manager, _ = manager_for({
            SETTINGS: _exclude_response(_name="", _ip="10.0.0.9", _host="old.host"),
            PUT_SETTINGS: _exclude_response(_name="node-1"),
        })

        settings = await manager.drain("node-1")

        assert settings == ExclusionSettings(
            names=["node-1"], ips=["10.0.0.9"], hosts=["old.host"]
        )

    @pytest.mark.asyncio
    async def test_drain_twice_duplicates(self, fake_cluster):
        cluster = fake_cluster()
        manager = ExclusionManager(reader=cluster, store=cluster)

        await manager.drain("node-1")
        settings = await manager.drain("node-1")

        assert settings.names == ["node-1", "node-1"]

    @pytest.mark.asyncio
    async def test_failed_drain_raises(self, manager_for):
        manager, _ = manager_for({
            SETTINGS: _exclude_response(_name=""),
            PUT_SETTINGS: {"status_code": 500, "text": "boom"},
        })

        with pytest.raises(BadStatusError) as exc_info:
            await manager.drain("server_to_drain")

        assert exc_info.value.body == "boom"

    @pytest.mark.asyncio
    async def test_failed_read_skips_write(self, manager_for):
        manager, transport = manager_for({SETTINGS: {"status_code": 503, "text": "down"}})

        with pytest.raises(BadStatusError):
            await manager.drain("server_to_drain")

        assert transport.sent_bodies() == []

    @pytest.mark.asyncio
    async def test_empty_echoed_names_are_accepted(self, manager_for):
        manager, transport = manager_for({
            SETTINGS: _exclude_response(_name=""),
            PUT_SETTINGS: _exclude_response(_name=""),
        })

        settings = await manager.drain("")

        assert len(transport.sent_bodies()) == 1
        assert settings.names == []

    @pytest.mark.asyncio
    async def test_response_without_names_is_malformed(self, manager_for):
        manager, _ = manager_for({
            SETTINGS: _exclude_response(_name=""),
            PUT_SETTINGS: {"json": {"acknowledged": True, "persistent": {}, "transient": {}}},
        })

        with pytest.raises(MalformedResponseError):
            await manager.drain("server_to_drain")


class TestFill:
    """Tests for ExclusionManager.fill()."""

    @pytest.mark.asyncio
    async def test_fill_removes_from_existing_servers(self, manager_for):
        manager, transport = manager_for({
            SETTINGS: [
                _exclude_response(_name="excluded_server1,good_server,excluded_server2"),
                _exclude_response(_name="excluded_server1,excluded_server2"),
            ],
            PUT_SETTINGS: _exclude_response(_name="excluded_server1,excluded_server2"),
        })

        settings = await manager.fill("good_server")

        assert transport.sent_bodies() == [
            {"transient": {EXCLUDE_NAME_KEY: "excluded_server1,excluded_server2"}}
        ]
        assert settings.names == ["excluded_server1", "excluded_server2"]
        # read, write, re-read
        assert [r.method for r in transport.requests] == ["GET", "PUT", "GET"]

    @pytest.mark.asyncio
    async def test_fill_last_server_sends_empty_string(self, manager_for):
        manager, transport = manager_for({
            SETTINGS: [_exclude_response(_name="good_server"), _exclude_response(_name="")],
            PUT_SETTINGS: _exclude_response(_name=""),
        })

        settings = await manager.fill("good_server")

        assert transport.sent_bodies() == [{"transient": {EXCLUDE_NAME_KEY: ""}}]
        assert settings.names == []

    @pytest.mark.asyncio
    async def test_fill_strips_name_and_removes_every_match(self, fake_cluster):
        cluster = fake_cluster(transient={EXCLUDE_NAME_KEY: "a,node-1,b,node-1"})
        manager = ExclusionManager(reader=cluster, store=cluster)

        settings = await manager.fill("  node-1\n")

        assert settings.names == ["a", "b"]

    @pytest.mark.asyncio
    async def test_fill_after_drain_restores_names(self, fake_cluster):
        cluster = fake_cluster(transient={EXCLUDE_NAME_KEY: "a,b"})
        manager = ExclusionManager(reader=cluster, store=cluster)
        before = await manager.read()

        await manager.drain("node-1")
        after = await manager.fill("node-1")

        assert after.names == before.names


class TestFillAll:
    """Tests for ExclusionManager.fill_all()."""

    @pytest.mark.asyncio
    async def test_fill_all_sends_nested_body_without_read(self, manager_for):
        manager, transport = manager_for({
            PUT_SETTINGS: _exclude_response(_name="", _ip="", _host=""),
        })

        settings = await manager.fill_all()

        assert transport.sent_bodies() == [{"transient": {
            "cluster.routing.allocation.exclude": {"_name": "", "_ip": "", "_host": ""}
        }}]
        assert [r.method for r in transport.requests] == ["PUT"]
        assert settings == ExclusionSettings()

    @pytest.mark.asyncio
    async def test_fill_all_clears_prior_state(self, fake_cluster):
        cluster = fake_cluster(transient={
            EXCLUDE_NAME_KEY: "a,b",
            "cluster.routing.allocation.exclude._ip": "10.0.0.1",
            "cluster.routing.allocation.exclude._host": "h1",
        })
        manager = ExclusionManager(reader=cluster, store=cluster)

        assert await manager.fill_all() == ExclusionSettings()
        assert await manager.read() == ExclusionSettings()
