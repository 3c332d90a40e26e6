from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA1()),
        algorithm=hashes.SHA1(),
        label=None,
    )


def rsa_encrypt(public_key: RSAPublicKey, data: bytes) -> bytes:
    """Encrypt with RSA-OAEP (SHA-1), as expected by the auth endpoint."""
    return public_key.encrypt(data, _oaep())


def rsa_decrypt(private_key: RSAPrivateKey, data: bytes) -> bytes:
    return private_key.decrypt(data, _oaep())
