import io
from typing import Dict, List, Optional

import pytest

from sftp_loader.config.models import LoaderConfig, PoolConfig, SFTPConfig
from sftp_loader.loader import FuzzyMatchSFTPFileLoader
from sftp_loader.sftp import SFTPConnectionManager, SFTPError


class FakeRemoteFile(io.BytesIO):
    """Remote file that can only be read while its client is connected."""

    def __init__(self, client, data):
        super().__init__(data)
        self.client = client

    def read(self, size=-1):
        if not self.client.connected:
            raise OSError('Socket is closed')
        return super().read(size)


class FakeSFTPClient:
    """In-memory stand-in for SFTPClient."""

    def __init__(self, config: Optional[SFTPConfig] = None, files: Optional[Dict[str, bytes]] = None,
                 fail_on: tuple = ()):
        self.config = config
        self.files = dict(files or {})
        self.fail_on = set(fail_on)
        self.connected = False
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.listed_paths: List[str] = []

    def connect(self):
        if 'connect' in self.fail_on:
            raise SFTPError('connection refused')
        self.connected = True
        self.connect_calls += 1

    def disconnect(self):
        self.connected = False
        self.disconnect_calls += 1

    @property
    def is_connected(self):
        return self.connected

    def list_entries(self, path='.'):
        self.listed_paths.append(path)
        if 'list' in self.fail_on:
            raise SFTPError('ls failed')
        return list(self.files)

    def open_file(self, filename):
        if 'get' in self.fail_on:
            raise SFTPError('get failed')
        return FakeRemoteFile(self, self.files[filename])

    def download_to(self, filename, buffer):
        if 'get' in self.fail_on:
            raise SFTPError('get failed')
        data = self.files[filename]
        buffer.write(data)
        return len(data)


class RecordingManager:
    """Connection manager handing out a single client and counting calls."""

    def __init__(self, client):
        self.client = client
        self.acquired = 0
        self.released = []

    def acquire(self):
        self.acquired += 1
        return self.client

    def release(self, client):
        self.released.append(client)


@pytest.fixture
def sftp_config():
    return SFTPConfig(host='sftp.example.com', username='loader', password='secret')


@pytest.fixture
def make_loader():
    def internal(files, fail_on=(), **loader_options):
        client = FakeSFTPClient(files=files, fail_on=fail_on)
        client.connect()
        manager = RecordingManager(client)
        loader = FuzzyMatchSFTPFileLoader(manager, LoaderConfig(**loader_options))
        return loader, manager

    return internal


@pytest.fixture
def fake_client_cls():
    return FakeSFTPClient


@pytest.fixture
def make_pooled_loader(sftp_config):
    def internal(files, fail_on=(), **pool_options):
        def factory(config):
            return FakeSFTPClient(config, files=files, fail_on=fail_on)

        manager = SFTPConnectionManager(sftp_config, PoolConfig(**pool_options), client_factory=factory)
        return FuzzyMatchSFTPFileLoader(manager), manager

    return internal
