'''
A collection of tools to assist in analyzing encrypted blobs of data
through chosen plaintext attacks.

Copyright (C) 2011-2012 Virtual Security Research, LLC
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

from .buffertools import (blockWiseDiff, blockWiseColorMap, findRepeatedBlock,
                          pkcs7PadBuffer, iterBuffer)
from .Exceptions import SearchExhaustedError

# Throughout this module an encryptionOracle is a function accepting one
# bytes argument.  It encrypts that argument as part of a larger
# (unknown) plaintext and returns the ciphertext.


def _log(log_file, s):
    if log_file != None:
        log_file.write('COLOSSUS: %s\n' % s)


def isECB(encryptionOracle, block_size=16):
    '''
    Returns True if the oracle appears to encrypt in ECB mode.  Three
    blocks of identical input guarantee two identical aligned blocks
    whatever the oracle puts in front, and under ECB those encrypt
    identically.
    '''
    ciphertext = encryptionOracle(b'\x00'*(3*block_size))
    return len(blockWiseColorMap(block_size, [ciphertext])) > 0


def detectECB(blobs, block_size=16):
    '''
    Returns the blobs, in their original order, that contain at least one
    repeated block.
    '''
    return [blob for blob in blobs if len(blockWiseColorMap(block_size, [blob])) > 0]


def findBlockSize(encryptionOracle, max_block_size=256):
    '''
    Feeds the oracle a growing run of zero bytes until the ciphertext gets
    longer.  The size of the jump is the block size.

    Returns a dictionary with:
     block_size - the algorithm's block size
     fixed_length - the number of unpadded bytes the oracle adds around
                    the chosen input (prefix and suffix together)
    '''
    base_length = len(encryptionOracle(b''))
    for i in range(1, max_block_size+1):
        length = len(encryptionOracle(b'\x00'*i))
        if length != base_length:
            # The padding grew to a whole block at exactly this input length
            return {'block_size':length-base_length,
                    'fixed_length':base_length-i}

    raise SearchExhaustedError("Ciphertext length never changed; not a block cipher?")


def ECB_FindPrefixLength(encryptionOracle, block_size, fills=b'\x00\x01\x02\x03'):
    '''
    Finds the length of the unknown prefix an ECB oracle places in front of
    the chosen input.

    The chosen input is grown from two to three blocks until two
    neighbouring ciphertext blocks match; at that point the input is
    aligned with a block boundary.  Only blocks that change along with the
    chosen input count, so repeats inside the prefix or the suffix are
    ignored.  A prefix ending in (or a suffix starting with) the fill byte
    still fakes an early match, so the scan is repeated with different
    fill bytes until two of them agree.
    '''
    seen = []
    for fill in fills:
        for length in range(2*block_size, 3*block_size):
            ciphertext = encryptionOracle(bytes([fill])*length)
            changed = blockWiseDiff(block_size, ciphertext,
                                    encryptionOracle(bytes([fill^0xFF])*length))
            if not changed:
                continue

            index = findRepeatedBlock(block_size, ciphertext, min(changed))
            if index != None and index in changed and index+1 in changed:
                prefix_length = (index+2)*block_size - length
                if prefix_length in seen:
                    return prefix_length
                seen.append(prefix_length)
                break

    raise SearchExhaustedError("Failed to find prefix length")


# Chosen plaintext attack on ECB encryption
#
# This function will return a dictionary with information about the
# algorithm and chosen string attributes, including:
#  block_size - the algorithm's block size
#  chosen_offset - the chosen string's offset within the plaintext
#  fragment_length - the length of a chosen from the chosen_offset to the
#                    end of its current block
#
def ECB_FindChosenOffset(encryptionOracle, block_size=16):
    ret_val = {}

    # One byte longer than a block so at least one block boundary falls
    # inside the chosen string
    chosen_length = block_size+1
    base = encryptionOracle(b'O'*chosen_length)

    test_result = encryptionOracle(b'X' + b'O'*(chosen_length-1))
    different_blocks = blockWiseDiff(block_size, base, test_result)
    # Sanity check
    if different_blocks == None or len(different_blocks) != 1:
        raise SearchExhaustedError("Single byte change altered %r blocks (not ECB mode?)" % different_blocks)

    for i in range(2,chosen_length+1):
        chosen = b'X'*i + b'O'*(chosen_length-i)
        test_result = encryptionOracle(chosen)
        different_blocks = blockWiseDiff(block_size, base, test_result)

        if different_blocks == None or len(different_blocks) == 0 or len(different_blocks) > 2:
            raise SearchExhaustedError("Offset detection yielded inconsistent block diffs (not ECB mode?)")
        if len(different_blocks) == 2:
            break
    else:
        raise SearchExhaustedError("Chosen string never crossed a block boundary")

    ret_val['block_size'] = block_size
    ret_val['fragment_length'] = i-1
    ret_val['chosen_offset'] = max(different_blocks)*block_size - ret_val['fragment_length']

    return ret_val


def ECB_DecryptSuffix(encryptionOracle, block_size=None, prefix_length=None,
                      filler=b'\x00', log_file=None):
    '''
    Byte-at-a-time decryption of whatever an ECB oracle appends to the
    chosen input.

    For every unknown byte the chosen input is sized so the byte lands at
    the end of a block.  That block is the target.  Then the known
    plaintext plus each candidate byte 0..255 is encrypted until one
    produces the same block; the first match wins.

    The secret length is taken from the oracle's unpadded output length,
    so trailing padding is never mistaken for secret content.  A prefix
    length that has to be discovered is cross-checked against
    ECB_FindChosenOffset.
    '''
    lengths = findBlockSize(encryptionOracle)
    if block_size == None:
        block_size = lengths['block_size']
    if prefix_length == None:
        prefix_length = ECB_FindPrefixLength(encryptionOracle, block_size)
        chosen_offset = ECB_FindChosenOffset(encryptionOracle, block_size)['chosen_offset']
        if chosen_offset != prefix_length:
            _log(log_file, "Prefix length %d disagrees with chosen offset %d"
                 % (prefix_length, chosen_offset))
            raise SearchExhaustedError("Prefix length and chosen offset disagree")

    secret_length = lengths['fixed_length'] - prefix_length
    _log(log_file, "Block size: %d, prefix length: %d, secret length: %d"
         % (block_size, prefix_length, secret_length))

    # Chosen bytes needed to push the prefix to a block boundary
    align = (block_size - prefix_length % block_size) % block_size
    prefix_blocks = (prefix_length + align) // block_size

    recovered = b''
    for i in range(0, secret_length):
        offset = filler*(align + block_size - 1 - i % block_size)
        start = (prefix_blocks + i // block_size)*block_size
        target = encryptionOracle(offset)[start:start+block_size]

        for c in range(0, 256):
            guess = encryptionOracle(offset + recovered + bytes([c]))[start:start+block_size]
            if guess == target:
                recovered += bytes([c])
                break
        else:
            _log(log_file, "Byte %d could not be determined.  Recovered so far: %r" % (i, recovered))
            raise SearchExhaustedError("No candidate matched secret byte %d" % i)

    _log(log_file, "Recovered: %r" % recovered)
    return recovered


def ECB_EncryptBlock(encryptionOracle, block, chosen_offset, block_size=16, filler=b'A'):
    '''
    Obtains the ECB encryption of one arbitrary plaintext block by placing
    it, block aligned, inside the chosen input.
    '''
    align = (block_size - chosen_offset % block_size) % block_size
    start = chosen_offset + align
    return encryptionOracle(filler*align + bytes(block))[start:start+block_size]


def ECB_ReplaceTail(encryptionOracle, chosen_offset, trailer_length, replacement,
                    block_size=16, filler=b'A'):
    '''
    Cut-and-paste forgery.  The chosen input is sized so that the
    trailer_length bytes the oracle writes after it end on a block
    boundary.  Everything from there on is replaced with separately
    encrypted blocks of the (padded) replacement.
    '''
    length = (block_size - (chosen_offset + trailer_length) % block_size) % block_size
    keep = chosen_offset + length + trailer_length
    head = encryptionOracle(filler*length)[:keep]

    tail = b''.join(ECB_EncryptBlock(encryptionOracle, block, chosen_offset, block_size, filler)
                    for block in iterBuffer(pkcs7PadBuffer(replacement, block_size), block_size))
    return head + tail
