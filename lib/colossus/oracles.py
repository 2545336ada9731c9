'''
Oracles: services that hold a secret key (and perhaps secret plaintext)
and expose one narrow entry point to an attacker.

Each oracle generates its secrets once, in its constructor, and keeps them
for its whole lifetime.  Attacks never receive the oracle itself, only the
bound method for the capability they need, e.g.:

  oracle = ECBSuffixOracle(secret)
  ECB_DecryptSuffix(oracle.encrypt)

Copyright (C) 2026 The Colossus Authors

 This program is free software: you can redistribute it and/or modify
 it under the terms of the GNU Lesser General Public License, version 3,
 as published by the Free Software Foundation.

 This program is distributed in the hope that it will be useful,
 but WITHOUT ANY WARRANTY; without even the implied warranty of
 MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
 GNU General Public License for more details.

 You should have received a copy of the GNU General Public License
 along with this program.  If not, see <http://www.gnu.org/licenses/>.
'''

import hmac
import random
from Crypto.Random import get_random_bytes
from . import modes
from .cipher import randomKey, BLOCK_SIZE
from .Exceptions import PaddingError, InvalidPlaintextError

COMMENT_PREFIX = b'comment1=cooking%20MCs;userdata='
COMMENT_SUFFIX = b';comment2=%20like%20a%20pound%20of%20bacon'

_rng = random.SystemRandom()


def escapeUserdata(data):
    '''Quotes the field metacharacters so user data cannot add fields.'''
    return bytes(data).replace(b';', b'%3B').replace(b'=', b'%3D')


def parseFields(blob, separator=b';'):
    '''
    Parses "k=v" pairs.  Operates on raw bytes, since a tampered ciphertext
    can decrypt to anything.  Pairs without an "=" are skipped.
    '''
    fields = {}
    for field in bytes(blob).split(separator):
        name,eq,value = field.partition(b'=')
        if eq:
            fields[name] = value
    return fields


def profileFor(email):
    email = bytes(email).replace(b'&', b'').replace(b'=', b'')
    return b'email=' + email + b'&uid=10&role=user'


class ECBSuffixOracle:
    """Encrypts prefix || chosen || suffix under ECB with a fixed key.
    The prefix may be empty."""

    def __init__(self, suffix, prefix=b'', key=None):
        self._key = key or randomKey()
        self._prefix = bytes(prefix)
        self._suffix = bytes(suffix)

    @classmethod
    def withRandomPrefix(cls, suffix, max_prefix=100):
        return cls(suffix, prefix=get_random_bytes(_rng.randint(0, max_prefix)))

    def encrypt(self, chosen):
        return modes.encryptECB(self._key, self._prefix + bytes(chosen) + self._suffix)


class ModeOracle:
    """Encrypts under a fresh key with ECB or CBC, chosen at random on
    every call.  The input is wrapped in 5-10 random bytes on each side.
    last_mode records the choice so a distinguisher can be checked."""

    last_mode = None

    def encrypt(self, chosen):
        key = randomKey()
        plaintext = (get_random_bytes(_rng.randint(5, 10)) + bytes(chosen)
                     + get_random_bytes(_rng.randint(5, 10)))

        if _rng.getrandbits(1):
            self.last_mode = 'ECB'
            return modes.encryptECB(key, plaintext)

        self.last_mode = 'CBC'
        return modes.encryptCBC(key, get_random_bytes(BLOCK_SIZE), plaintext)


class PaddingOracle:
    """Holds one CBC encrypted token and answers only whether a submitted
    (iv, ciphertext) pair decrypts to valid padding."""

    def __init__(self, plaintexts, key=None):
        self._key = key or randomKey()
        self._iv = get_random_bytes(BLOCK_SIZE)
        self._plaintext = _rng.choice(list(plaintexts))

    def token(self):
        return self._iv, modes.encryptCBC(self._key, self._iv, self._plaintext)

    def check_padding(self, iv, ciphertext):
        try:
            modes.decryptCBC(self._key, iv, ciphertext)
        except PaddingError:
            return False
        return True


class _CommentOracle:
    PREFIX_LENGTH = len(COMMENT_PREFIX)

    def _encrypt(self, plaintext):
        raise NotImplementedError

    def _decrypt(self, ciphertext):
        raise NotImplementedError

    def encrypt(self, userdata):
        return self._encrypt(COMMENT_PREFIX + escapeUserdata(userdata) + COMMENT_SUFFIX)

    def parse(self, ciphertext):
        return parseFields(self._decrypt(ciphertext), b';')

    def is_admin(self, ciphertext):
        return self.parse(ciphertext).get(b'admin') == b'true'


class CBCCommentOracle(_CommentOracle):

    def __init__(self):
        self._key = randomKey()
        self._iv = get_random_bytes(BLOCK_SIZE)

    def _encrypt(self, plaintext):
        return modes.encryptCBC(self._key, self._iv, plaintext)

    def _decrypt(self, ciphertext):
        return modes.decryptCBC(self._key, self._iv, ciphertext)


class CTRCommentOracle(_CommentOracle):

    def __init__(self):
        self._key = randomKey()
        self._nonce = get_random_bytes(modes.NONCE_SIZE)

    def _encrypt(self, plaintext):
        return modes.encryptCTR(self._key, self._nonce, plaintext)

    def _decrypt(self, ciphertext):
        return modes.decryptCTR(self._key, self._nonce, ciphertext)


class IVKeyOracle(_CommentOracle):
    """CBC with the key reused as the IV.  check() plays a receiver that
    complains, plaintext included, about any byte above 127."""

    def __init__(self):
        self._key = randomKey()

    def _encrypt(self, plaintext):
        return modes.encryptCBC(self._key, self._key, plaintext)

    def _decrypt(self, ciphertext):
        return modes.decryptCBC(self._key, self._key, ciphertext)

    def check(self, ciphertext):
        plaintext = self._decrypt(ciphertext)
        if any(b > 127 for b in plaintext):
            raise InvalidPlaintextError(plaintext)

    def verify_key(self, candidate):
        return hmac.compare_digest(bytes(candidate), self._key)


class ProfileOracle:
    """ECB encrypted "email=...&uid=10&role=user" cookies."""

    PREFIX_LENGTH = len(b'email=')
    TRAILER_LENGTH = len(b'&uid=10&role=')

    def __init__(self):
        self._key = randomKey()

    def encrypt(self, email):
        return modes.encryptECB(self._key, profileFor(email))

    def role(self, ciphertext):
        return parseFields(modes.decryptECB(self._key, ciphertext), b'&').get(b'role')


class CTREditOracle:
    """CTR ciphertext with a random-access edit operation, as a disk
    encryption layer might offer."""

    def __init__(self, plaintext):
        self._key = randomKey()
        self._nonce = get_random_bytes(modes.NONCE_SIZE)
        self.ciphertext = modes.encryptCTR(self._key, self._nonce, plaintext)

    def edit(self, ciphertext, offset, newtext):
        if offset < 0 or offset + len(newtext) > len(ciphertext):
            raise ValueError("Edit of %d bytes at offset %d outside %d byte ciphertext"
                             % (len(newtext), offset, len(ciphertext)))
        patch = modes.cryptCTR(self._key, self._nonce, newtext, offset)
        return bytes(ciphertext[:offset]) + patch + bytes(ciphertext[offset+len(newtext):])
