"""
Token encryption - encrypt / decrypt OAuth tokens at rest.

AES-256-CBC with PKCS7 padding from the ``cryptography`` package.
Each call to encrypt() draws a fresh random IV, and the stored form is:

    <iv as hex>:<ciphertext as hex>

There is no authentication tag. The scheme hides token contents but
does not detect tampering with the stored value.
"""

import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from calsync.core.errors import ConfigurationError, DecryptionError


KEY_SIZE = 32  # AES-256
IV_SIZE = 16   # AES block size
SEPARATOR = ":"


class TokenCipher:
    """
    Symmetric cipher for opaque credential strings.

    The key is fixed at construction and never re-read.

    Example:
        cipher = TokenCipher.from_hex(settings.ENCRYPTION_KEY)
        stored = cipher.encrypt("ya29.a0Af...")
        cipher.decrypt(stored)  # "ya29.a0Af..."
    """

    def __init__(self, key: bytes):
        if len(key) != KEY_SIZE:
            raise ConfigurationError(
                f"Encryption key must be {KEY_SIZE} bytes, got {len(key)}"
            )
        self._key = bytes(key)

    @classmethod
    def from_hex(cls, hex_key: str) -> "TokenCipher":
        """Build a cipher from a hex-encoded key (64 characters)."""
        try:
            key = bytes.fromhex(hex_key.strip())
        except ValueError as e:
            raise ConfigurationError("Encryption key is not valid hex") from e
        return cls(key)

    def _cipher(self, iv: bytes) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.CBC(iv))

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a string and return ``ivHex:ciphertextHex``."""
        iv = os.urandom(IV_SIZE)

        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

        encryptor = self._cipher(iv).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return f"{iv.hex()}{SEPARATOR}{ciphertext.hex()}"

    def decrypt(self, opaque: str) -> str:
        """
        Decrypt a value produced by encrypt().

        Raises:
            DecryptionError: If the value is malformed, the IV has the wrong
                length, or it was not encrypted with this key
        """
        iv_hex, sep, ciphertext_hex = opaque.partition(SEPARATOR)
        if not sep:
            raise DecryptionError("Encrypted value has no IV separator")

        try:
            iv = bytes.fromhex(iv_hex)
            ciphertext = bytes.fromhex(ciphertext_hex)
        except ValueError as e:
            raise DecryptionError("Encrypted value is not valid hex") from e

        if len(iv) != IV_SIZE:
            raise DecryptionError(f"IV must be {IV_SIZE} bytes, got {len(iv)}")

        block_bytes = algorithms.AES.block_size // 8
        if not ciphertext or len(ciphertext) % block_bytes:
            raise DecryptionError("Ciphertext length is not a whole number of blocks")

        decryptor = self._cipher(iv).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()

        # A wrong key almost always shows up as broken padding
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        try:
            plaintext = unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise DecryptionError("Ciphertext was not produced with the current key") from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("Ciphertext was not produced with the current key") from e
