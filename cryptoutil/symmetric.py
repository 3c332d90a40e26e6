import secrets

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

BLOCK_SIZE = 16


def symmetric_encrypt(key: bytes, plaintext: bytes) -> bytes:
    """
    AES-CBC with PKCS#7 padding and a random iv.
    The iv is encrypted with AES-ECB and prepended to the ciphertext.
    """
    iv = secrets.token_bytes(BLOCK_SIZE)

    iv_encryptor = Cipher(algorithms.AES(key), modes.ECB()).encryptor()
    crypted_iv = iv_encryptor.update(iv) + iv_encryptor.finalize()

    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return crypted_iv + encryptor.update(padded) + encryptor.finalize()


def symmetric_decrypt(key: bytes, data: bytes) -> bytes:
    if len(data) < 2 * BLOCK_SIZE or len(data) % BLOCK_SIZE != 0:
        raise ValueError(f"ciphertext has invalid length {len(data)}")

    iv_decryptor = Cipher(algorithms.AES(key), modes.ECB()).decryptor()
    iv = iv_decryptor.update(data[:BLOCK_SIZE]) + iv_decryptor.finalize()

    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(data[BLOCK_SIZE:]) + decryptor.finalize()

    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    return unpadder.update(padded) + unpadder.finalize()
