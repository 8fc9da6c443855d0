import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from keychain_tx.draft import TransactionDraft
from keychain_tx.features.submit.service import SubmitWorkflow
from keychain_tx.form import TransactionForm
from keychain_tx.shared import crypto
from keychain_tx.shared.config import FormConfig
from tests.helpers import address_of


def hex_address(fill: int, hash_algo: int = crypto.HASH_SHA256) -> str:
    """Hex of a well formed address whose digest repeats ``fill``."""
    return address_of(fill, hash_algo).hex()


@dataclass
class FakeTransaction:
    address: bytes
    draft: TransactionDraft
    service: str
    index: int
    origin_key: bytes | None = None

    def origin_sign(self, private_key: bytes) -> None:
        self.origin_key = private_key

    def to_dict(self) -> dict[str, Any]:
        return {"address": self.address.hex()}


@dataclass
class FakeKeychain:
    version: int = 1
    services: tuple[str, ...] = ("uco",)
    built: list[FakeTransaction] = field(default_factory=list)

    def derive_address(self, service: str, index: int) -> bytes:
        if service not in self.services:
            raise KeyError(f"Unknown service '{service}'")
        return bytes([index]) * 34

    def build_transaction(
        self, draft: TransactionDraft, service: str, index: int
    ) -> FakeTransaction:
        transaction = FakeTransaction(
            address=bytes([index + 1]) * 34, draft=draft, service=service, index=index
        )
        self.built.append(transaction)
        return transaction


class FakeClient:
    def __init__(
        self,
        endpoint: str = "http://localhost:4000",
        keychain: FakeKeychain | None = None,
        last_index: int = 0,
        network_key: str = "0001" + "ab" * 32,
    ):
        self.endpoint = endpoint
        self.keychain = keychain or FakeKeychain()
        self.last_index = last_index
        self.network_key = network_key
        self.keychain_error: Exception | None = None
        self.index_error: Exception | None = None
        self.network_key_error: Exception | None = None
        self.network_key_calls = 0
        self.seeds: list[str] = []

    def fetch_keychain(self, seed: str) -> FakeKeychain:
        self.seeds.append(seed)
        if self.keychain_error:
            raise self.keychain_error
        return self.keychain

    def fetch_last_index(self, address: bytes) -> int:
        if self.index_error:
            raise self.index_error
        return self.last_index

    def fetch_network_public_key(self) -> str:
        self.network_key_calls += 1
        if self.network_key_error:
            raise self.network_key_error
        return self.network_key

    def send_transaction(self, transaction: Any, timeout: float | None = None) -> dict[str, Any]:
        return {"status": "pending"}


class FakeSender:
    def __init__(self, client: FakeClient):
        self.client = client
        self.dispatched: list[dict[str, Any]] = []

    def dispatch(self, transaction, retries, timeout_ms, on_sent, on_error) -> None:
        self.dispatched.append(
            {
                "transaction": transaction,
                "retries": retries,
                "timeout_ms": timeout_ms,
                "on_sent": on_sent,
                "on_error": on_error,
            }
        )


class Recorder:
    """Connect function and sender factory that remember what they built."""

    def __init__(self, client: FakeClient):
        self.client = client
        self.endpoints: list[str] = []
        self.senders: list[FakeSender] = []

    def connect(self, endpoint: str) -> FakeClient:
        self.endpoints.append(endpoint)
        return self.client

    def sender_factory(self, client: FakeClient) -> FakeSender:
        sender = FakeSender(client)
        self.senders.append(sender)
        return sender


@pytest.fixture(autouse=True)
def isolate_app_dir(monkeypatch):
    """Run tests with an isolated application directory."""
    for name in ("KEYCHAIN_TX_ORIGIN_KEY", "KEYCHAIN_TX_SERVICE", "KEYCHAIN_TX_SEED"):
        monkeypatch.delenv(name, raising=False)
    with tempfile.TemporaryDirectory(prefix="keychain-tx-test-") as tmp_dir:
        monkeypatch.setenv("KEYCHAIN_TX_DIR", str(Path(tmp_dir)))
        yield Path(tmp_dir)


@pytest.fixture
def make_address():
    return hex_address


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def recorder(fake_client):
    return Recorder(fake_client)


@pytest.fixture
def secret_key():
    return bytes(range(32))


@pytest.fixture
def workflow(recorder):
    return SubmitWorkflow(
        connect=recorder.connect,
        origin_private_key=bytes.fromhex(FormConfig().origin_private_key),
        retries=1,
        timeout_ms=1000,
        sender_factory=recorder.sender_factory,
    )


@pytest.fixture
def form(recorder, workflow, secret_key):
    form = TransactionForm(
        config=FormConfig(),
        connect=recorder.connect,
        workflow=workflow,
        secret_key=secret_key,
    )
    form.initialize()
    return form
