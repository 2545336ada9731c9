'''
The fixed-block primitive everything else is built on: AES-128 applied to
exactly one 16 byte block at a time.

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

from Crypto.Cipher import AES
from Crypto.Random import get_random_bytes
from .Exceptions import InvalidBlockError

BLOCK_SIZE = 16
KEY_SIZE = 16


def randomKey(length=KEY_SIZE):
    return get_random_bytes(length)


class BlockCipher:
    """Single-block AES-128.  No chaining, no padding; the mode engine
    supplies both.

    Wrong key or block lengths raise InvalidBlockError.  Those are
    programming errors and callers should not try to recover from them.
    """

    block_size = BLOCK_SIZE

    def __init__(self, key):
        if len(key) != KEY_SIZE:
            raise InvalidBlockError(KEY_SIZE, len(key), 'key')
        self._aes = AES.new(bytes(key), AES.MODE_ECB)

    def _check(self, block):
        if len(block) != self.block_size:
            raise InvalidBlockError(self.block_size, len(block))

    def encrypt_block(self, block):
        self._check(block)
        return self._aes.encrypt(bytes(block))

    def decrypt_block(self, block):
        self._check(block)
        return self._aes.decrypt(bytes(block))


def encryptBlock(key, block):
    return BlockCipher(key).encrypt_block(block)


def decryptBlock(key, block):
    return BlockCipher(key).decrypt_block(block)
