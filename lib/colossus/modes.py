'''
ECB, CBC and CTR modes of operation built on the single-block primitive.

Only the legacy, unauthenticated constructions are provided.  They exist
so the attacks in this package have something to break.

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

import struct
from . import buffertools
from .cipher import BlockCipher, BLOCK_SIZE
from .Exceptions import InvalidBlockError

NONCE_SIZE = 8


def _checkCiphertext(ciphertext):
    if len(ciphertext) == 0 or len(ciphertext) % BLOCK_SIZE != 0:
        raise InvalidBlockError(BLOCK_SIZE, len(ciphertext), 'ciphertext')


def _checkIV(iv):
    if len(iv) != BLOCK_SIZE:
        raise InvalidBlockError(BLOCK_SIZE, len(iv), 'IV')


def encryptECB(key, plaintext):
    cipher = BlockCipher(key)
    padded = buffertools.pkcs7PadBuffer(plaintext, BLOCK_SIZE)
    return b''.join(cipher.encrypt_block(block)
                    for block in buffertools.iterBuffer(padded, BLOCK_SIZE))


def decryptECB(key, ciphertext, log_file=None):
    cipher = BlockCipher(key)
    _checkCiphertext(ciphertext)
    plaintext = b''.join(cipher.decrypt_block(block)
                         for block in buffertools.iterBuffer(ciphertext, BLOCK_SIZE))
    return buffertools.stripPKCS7Pad(plaintext, BLOCK_SIZE, log_file)


def encryptCBC(key, iv, plaintext):
    cipher = BlockCipher(key)
    _checkIV(iv)

    prior = bytes(iv)
    ciphertext = []
    for block in buffertools.iterBuffer(buffertools.pkcs7PadBuffer(plaintext, BLOCK_SIZE), BLOCK_SIZE):
        prior = cipher.encrypt_block(buffertools.xorBuffers(block, prior))
        ciphertext.append(prior)

    return b''.join(ciphertext)


def decryptCBC(key, iv, ciphertext, log_file=None):
    '''
    Decrypts and strips the padding.  PaddingError propagates to the
    caller, which is what makes padding oracles possible.
    '''
    cipher = BlockCipher(key)
    _checkIV(iv)
    _checkCiphertext(ciphertext)

    prior = bytes(iv)
    plaintext = bytearray()
    for block in buffertools.iterBuffer(bytes(ciphertext), BLOCK_SIZE):
        plaintext += buffertools.xorBuffers(cipher.decrypt_block(block), prior)
        prior = block

    return buffertools.stripPKCS7Pad(plaintext, BLOCK_SIZE, log_file)


def ctrKeystream(key, nonce, length, offset=0):
    '''
    Returns length bytes of keystream starting at byte offset.  Counter
    blocks are the 8 byte nonce followed by a little-endian 64 bit block
    counter that starts at zero.
    '''
    cipher = BlockCipher(key)
    if len(nonce) != NONCE_SIZE:
        raise InvalidBlockError(NONCE_SIZE, len(nonce), 'nonce')

    first = offset // BLOCK_SIZE
    last = (offset + length + BLOCK_SIZE - 1) // BLOCK_SIZE
    stream = b''.join(cipher.encrypt_block(bytes(nonce) + struct.pack('<Q', counter))
                      for counter in range(first, last))

    skip = offset % BLOCK_SIZE
    return stream[skip:skip+length]


def cryptCTR(key, nonce, data, offset=0):
    '''
    CTR is its own inverse, so this both encrypts and decrypts.  No padding;
    the final block is a partial XOR.
    '''
    return bytes(buffertools.xorBuffers(data, ctrKeystream(key, nonce, len(data), offset)))


encryptCTR = cryptCTR
decryptCTR = cryptCTR
