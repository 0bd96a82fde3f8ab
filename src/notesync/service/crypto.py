# SPDX-License-Identifier: MIT

import base64
import binascii
import hashlib
from copy import deepcopy
from typing import TypeVar

from Cryptodome.Cipher import AES
from Cryptodome.Random import get_random_bytes
from Cryptodome.Util.Padding import pad, unpad

from notesync.errors import EncryptionKeyMissingError, WrongKeyError
from notesync.model.note import ENCRYPTED_FIELDS, Note

# OpenSSL "enc" format, which is what passphrase based CryptoJS.AES produces:
# base64("Salted__" || salt || AES-256-CBC(plaintext))
SALTED_PREFIX = b"Salted__"
SALT_SIZE = 8
KEY_SIZE = 32
BLOCK_SIZE = AES.block_size

N = TypeVar("N", bound=Note)


def _derive_key_and_iv(passphrase: str, salt: bytes) -> tuple[bytes, bytes]:
    """OpenSSL EVP_BytesToKey with MD5 and a single iteration."""
    password = passphrase.encode("utf-8")
    derived = b""
    block = b""
    while len(derived) < KEY_SIZE + BLOCK_SIZE:
        block = hashlib.md5(block + password + salt).digest()
        derived += block
    return derived[:KEY_SIZE], derived[KEY_SIZE : KEY_SIZE + BLOCK_SIZE]


def encrypt_text(text: str, key: str) -> str:
    salt = get_random_bytes(SALT_SIZE)
    aes_key, iv = _derive_key_and_iv(key, salt)
    cipher = AES.new(aes_key, AES.MODE_CBC, iv)
    encrypted = cipher.encrypt(pad(text.encode("utf-8"), BLOCK_SIZE))
    return base64.b64encode(SALTED_PREFIX + salt + encrypted).decode("ascii")


def decrypt_text(text: str, key: str) -> str:
    """
    Decrypt a passphrase encrypted string.

    Raises:
        WrongKeyError: If nothing readable comes out of the ciphertext,
            which is what happens when the key is wrong.
    """
    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise WrongKeyError() from e

    if not raw.startswith(SALTED_PREFIX) or len(raw) < 16 + BLOCK_SIZE:
        raise WrongKeyError()

    salt = raw[len(SALTED_PREFIX) : 16]
    aes_key, iv = _derive_key_and_iv(key, salt)
    cipher = AES.new(aes_key, AES.MODE_CBC, iv)
    try:
        decrypted = unpad(cipher.decrypt(raw[16:]), BLOCK_SIZE).decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        raise WrongKeyError() from e

    if decrypted == "":
        raise WrongKeyError()
    return decrypted


def encrypt_note(note: N, key: str) -> N:
    """Encrypt the free-text fields of a note. An empty key leaves it untouched."""
    if key == "":
        return note
    encrypted = deepcopy(note)
    for field in ENCRYPTED_FIELDS:
        value = encrypted.get(field)
        if value:
            encrypted[field] = encrypt_text(value, key)  # type: ignore[literal-required]
    encrypted["encrypted"] = True
    return encrypted


def decrypt_note(note: N, key: str) -> N:
    if not note.get("encrypted"):
        return note
    if key == "":
        raise EncryptionKeyMissingError()
    decrypted = deepcopy(note)
    for field in ENCRYPTED_FIELDS:
        value = decrypted.get(field)
        if value:
            decrypted[field] = decrypt_text(value, key)  # type: ignore[literal-required]
    return decrypted
