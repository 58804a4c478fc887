"""Shared test fixtures for jwtctl."""

from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from pydantic import BaseModel

PEM_PASSWORD = "changeit"


class KeyFiles(BaseModel):
    """PEM files written for one generated keypair."""

    private_pem: Path
    encrypted_pem: Path
    traditional_encrypted_pem: Path
    public_pem: Path


def _write_keypair(directory: Path, name: str, private_key) -> KeyFiles:
    password = serialization.BestAvailableEncryption(PEM_PASSWORD.encode())
    files = KeyFiles(
        private_pem=directory / f"{name}_private_no_pass.pem",
        encrypted_pem=directory / f"{name}_private.pem",
        traditional_encrypted_pem=directory / f"{name}_private_traditional.pem",
        public_pem=directory / f"{name}_public.pem",
    )
    files.private_pem.write_bytes(
        private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    files.encrypted_pem.write_bytes(
        private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=password,
        )
    )
    files.traditional_encrypted_pem.write_bytes(
        private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=password,
        )
    )
    files.public_pem.write_bytes(
        private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    )
    return files


@pytest.fixture(scope="session")
def key_dir(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return tmp_path_factory.mktemp("keys")


@pytest.fixture(scope="session")
def rsa_keys(key_dir: Path) -> KeyFiles:
    """An RSA-2048 keypair in every PEM flavour."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return _write_keypair(key_dir, "rsa_1", private_key)


@pytest.fixture(scope="session")
def other_rsa_keys(key_dir: Path) -> KeyFiles:
    """A second, unrelated RSA keypair."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return _write_keypair(key_dir, "rsa_2", private_key)


@pytest.fixture(scope="session")
def ec_keys(key_dir: Path) -> KeyFiles:
    """A P-256 keypair for ES256."""
    return _write_keypair(key_dir, "ec_p256", ec.generate_private_key(ec.SECP256R1()))


@pytest.fixture(scope="session")
def ed25519_private_pem(key_dir: Path) -> Path:
    """A private key of a type tokens cannot be signed with here."""
    path = key_dir / "ed25519_private.pem"
    path.write_bytes(
        ed25519.Ed25519PrivateKey.generate().private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    return path


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's JWTCTL_* environment out of the tests."""
    for name in ("JWTCTL_LOG_LEVEL", "JWTCTL_OUTPUT_FORMAT", "JWTCTL_PEM_PASSWORD"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def pem_password() -> str:
    return PEM_PASSWORD
