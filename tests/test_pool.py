import pytest

from sftp_loader.config.models import PoolConfig
from sftp_loader.sftp import PoolExhaustedError, SFTPConnectionManager, SFTPError
from sftp_loader.sftp import pool


@pytest.fixture
def created():
    return []


@pytest.fixture
def manager_factory(sftp_config, created, fake_client_cls):
    def internal(fail_on=(), **pool_options):
        def factory(config):
            client = fake_client_cls(config, files={'a.csv': b''}, fail_on=fail_on)
            created.append(client)
            return client

        return SFTPConnectionManager(sftp_config, PoolConfig(**pool_options), client_factory=factory)

    return internal


def test_acquire_connects(manager_factory, created, sftp_config):
    manager = manager_factory()
    client = manager.acquire()

    assert client.is_connected
    assert client.config is sftp_config
    assert manager.in_use_count == 1
    assert len(created) == 1


def test_idle_connection_is_reused(manager_factory, created):
    manager = manager_factory()
    first = manager.acquire()
    manager.release(first)
    assert manager.idle_count == 1

    assert manager.acquire() is first
    assert len(created) == 1


def test_stale_connection_is_replaced(manager_factory, created):
    manager = manager_factory()
    first = manager.acquire()
    manager.release(first)
    first.connected = False

    second = manager.acquire()
    assert second is not first
    assert len(created) == 2


def test_max_connections(manager_factory):
    manager = manager_factory(max_connections=1)
    client = manager.acquire()
    with pytest.raises(PoolExhaustedError):
        manager.acquire()

    manager.release(client)
    assert manager.acquire() is client


def test_release_keeps_every_live_connection(manager_factory):
    manager = manager_factory(max_connections=2, max_idle=2)
    first, second = manager.acquire(), manager.acquire()
    manager.release(first)
    manager.release(second)

    assert manager.idle_count == 2
    assert first.is_connected
    assert second.is_connected
    assert manager.in_use_count == 0


def test_release_drops_dead_connection(manager_factory):
    manager = manager_factory()
    client = manager.acquire()
    client.connected = False
    manager.release(client)

    assert manager.idle_count == 0
    assert client.disconnect_calls == 1


def test_release_none_is_noop(manager_factory):
    manager = manager_factory()
    manager.release(None)
    assert manager.in_use_count == 0


def test_failed_connect_frees_slot(manager_factory):
    manager = manager_factory(fail_on=('connect',), max_connections=1)
    with pytest.raises(SFTPError):
        manager.acquire()
    assert manager.in_use_count == 0


def test_connection_context_releases_on_error(manager_factory):
    manager = manager_factory()
    with pytest.raises(RuntimeError):
        with manager.connection():
            raise RuntimeError('boom')

    assert manager.in_use_count == 0
    assert manager.idle_count == 1


def test_close_all(manager_factory):
    manager = manager_factory()
    idle, busy = manager.acquire(), manager.acquire()
    manager.release(idle)
    manager.close_all()

    assert not idle.is_connected
    assert manager.idle_count == 0
    with pytest.raises(SFTPError):
        manager.acquire()

    manager.release(busy)
    assert not busy.is_connected


def test_test_connection(manager_factory):
    assert pool.test_connection(manager_factory())
    assert not pool.test_connection(manager_factory(fail_on=('list',)))
    assert not pool.test_connection(manager_factory(fail_on=('connect',)))
