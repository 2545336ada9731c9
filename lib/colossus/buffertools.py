'''
A collection of tools to manipulate buffers of encrypted content

Copyright (C) 2011-2012 Virtual Security Research, LLC
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

import sys
import zlib
from .Exceptions import PaddingError

# Computes the block-wise differences between two strings
# Blobs must be the same length and their length must be a multiple of block_size
#
# Returns a list of block numbers that are different from one another.
# Examples:
# blockWiseDiff(8, b'1234567812345678', b'12345678XXXXXXXX')
# => [1]
#
# blockWiseDiff(1, b'12345', b'12345')
# => []
#

def blockWiseDiff(block_size, blob1, blob2):
    if len(blob1) != len(blob2):
        sys.stderr.write("ERROR: Ciphertexts not the same length.\n")
        return None

    if (len(blob1) % block_size) != 0:
        sys.stderr.write("ERROR: Ciphertexts do not have an even multiple of blocks.\n")
        return None

    return [b for b,(block1,block2) in enumerate(zip(iterBuffer(blob1, block_size),
                                                      iterBuffer(blob2, block_size)))
            if block1 != block2]


def blockWiseColorMap(block_size, blobs):
    '''
    Accepts a sequence of blobs and compares all individual blocks
    (of block_size) within those blobs.  Returns a dictionary where the
    keys are blocks from the original blobs whose values were repeated
    at least once. (Unique blocks in the original blobs will not be
    represented in the return value.) The values of the returned
    dictionary are a 32bit integer hash value of the blocks they are
    associated with.
    '''
    block_counts = {}
    for blob in blobs:
        for block in iterBuffer(bytes(blob), block_size):
            block_counts[block] = block_counts.get(block, 0) + 1

    colors = {}
    for block,count in block_counts.items():
        if count > 1:
            colors[block] = zlib.crc32(block) & 0xFFFFFFFF

    return colors


def findRepeatedBlock(block_size, blob, start=0):
    '''
    Returns the index of the first block at or after start that is
    identical to the block right after it, or None if no two neighbouring
    blocks match.
    '''
    blocks = splitBuffer(blob, block_size)
    for i in range(start, len(blocks)-1):
        if len(blocks[i]) == block_size and blocks[i] == blocks[i+1]:
            return i
    return None


# XORs two buffers (bytes/bytearrays) and returns result
#
# If buffers not the same length, returned buffer length
# will be that of the shorter buffer.
#
def xorBuffers(buff1, buff2):
    max_len = min(len(buff1), len(buff2))

    ret_val = bytearray(buff1[0:max_len])
    other = bytearray(buff2[0:max_len])
    for i in range(0,len(ret_val)):
        ret_val[i] ^= other[i]

    return ret_val


def splitBuffer(buf, block_size):
    '''
    Splits a buffer into evenly sized blocks.
    '''
    return [buf[i:i + block_size] for i in range(0, len(buf), block_size)]


def iterBuffer(buf, block_size):
    '''
    Iterates through a buffer in evenly sized blocks.
    '''
    return (buf[i:i + block_size] for i in range(0, len(buf), block_size))


def pkcs7Pad(length):
    '''
    Returns the PKCS#7 pad string for a pad of the given length.
    '''
    return bytes([length])*length


def pkcs7PadBuffer(buf, block_size):
    '''
    Pads the end of a buffer using PKCS#7 padding.  An already aligned
    buffer gets a full block of padding.
    '''
    if not 0 < block_size < 256:
        raise ValueError("PKCS#7 block size must be between 1 and 255, got %d" % block_size)
    padding = block_size - (len(buf) % block_size)
    return bytes(buf) + pkcs7Pad(padding)


def stripPKCS7Pad(buf, block_size=None, log_file=None):
    '''
    Removes PKCS#7 padding from the end of a buffer.

    Raises PaddingError if the pad is malformed.  The error is the same
    no matter which check failed.
    '''
    buf = bytes(buf)
    if len(buf) > 0:
        pad_length = buf[-1]
        if (pad_length != 0 and pad_length <= len(buf)
            and (block_size == None or pad_length <= block_size)
            and buf[-pad_length:] == pkcs7Pad(pad_length)):
            return buf[:-pad_length]

    if log_file != None:
        log_file.write('COLOSSUS: Padding check failed\n')
    raise PaddingError()
