'''
A collection of tools to assist in analyzing encrypted data
through chosen ciphertext attacks.

Copyright (C) 2012-2013 Virtual Security Research, LLC
Author: Timothy D. Morgan
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

from .buffertools import xorBuffers
from .Exceptions import InvalidPlaintextError, SearchExhaustedError


def _flip(ciphertext, offset, known, desired):
    if len(known) != len(desired):
        raise ValueError("Known and desired plaintext must be the same length")
    if offset < 0 or offset+len(known) > len(ciphertext):
        raise ValueError("Flip region outside of ciphertext")

    ret_val = bytearray(ciphertext)
    delta = xorBuffers(known, desired)
    for i in range(0,len(delta)):
        ret_val[offset+i] ^= delta[i]
    return bytes(ret_val)


def CBC_FlipBits(ciphertext, offset, known, desired, block_size=16):
    '''
    Makes the plaintext at offset decrypt to desired instead of known by
    XORing the difference into the ciphertext block in front of it.  That
    earlier block decrypts to garbage afterwards.

    The region must not cross a block boundary, and must not lie in the
    first block (whose prior is the IV, not part of the ciphertext).
    '''
    if offset < block_size:
        raise ValueError("Cannot flip bits in the first block without the IV")
    if offset//block_size != (offset+len(known)-1)//block_size:
        raise ValueError("Flip region crosses a block boundary")
    return _flip(ciphertext, offset-block_size, known, desired)


def CTR_FlipBits(ciphertext, offset, known, desired):
    '''
    Same as CBC_FlipBits for a stream construction.  The difference lands
    exactly where it is applied and nothing else changes.
    '''
    return _flip(ciphertext, offset, known, desired)


def CBC_InjectPayload(encryptionOracle, chosen_offset, payload, block_size=16, filler=b'A'):
    '''
    Returns a ciphertext that decrypts with payload in place of chosen
    input, even if the oracle would never encrypt payload itself.

    The chosen input is one aligning fragment plus two whole blocks of
    filler.  The first block is sacrificed: its ciphertext is tweaked so
    that the second decrypts to the payload.
    '''
    if len(payload) > block_size:
        raise ValueError("Payload must fit in one block")

    align = (block_size - chosen_offset % block_size) % block_size
    ciphertext = encryptionOracle(filler*(align+2*block_size))
    target = chosen_offset + align + block_size
    return CBC_FlipBits(ciphertext, target, filler*len(payload), payload, block_size)


def CTR_InjectPayload(encryptionOracle, chosen_offset, payload, filler=b'A'):
    ciphertext = encryptionOracle(filler*len(payload))
    return CTR_FlipBits(ciphertext, chosen_offset, filler*len(payload), payload)


def CBC_RecoverIVKey(encryptionOracle, checker, block_size=16, attempts=8, log_file=None):
    '''
    Recovers the key of a CBC implementation that also uses it as the IV.

    A ciphertext of at least four blocks is rearranged into
    C1 || 0 || C1 || C4... and handed to the checker, which is expected to
    raise InvalidPlaintextError carrying the decrypted message.  Block one
    decrypts to D(C1) ^ IV and block three to D(C1) ^ 0, so the XOR of the
    two is the IV, i.e. the key.  The untouched tail keeps the padding
    valid.

    If the rearranged message happens to decrypt to plain ASCII the
    checker stays silent; a different filler gives a new ciphertext.
    '''
    for attempt in range(0, attempts):
        filler = bytes([0x41+attempt])
        ciphertext = encryptionOracle(filler*(3*block_size))
        first = ciphertext[0:block_size]
        forged = first + b'\x00'*block_size + first + ciphertext[3*block_size:]

        try:
            checker(forged)
        except InvalidPlaintextError as e:
            plaintext = e.plaintext
            return bytes(xorBuffers(plaintext[0:block_size], plaintext[2*block_size:3*block_size]))

        if log_file != None:
            log_file.write('COLOSSUS: Checker accepted forged message, retrying\n')

    raise SearchExhaustedError("Checker never leaked a plaintext")
