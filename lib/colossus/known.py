'''
A collection of tools to assist in analyzing encrypted blobs of data
through known plaintext attacks.

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

from .buffertools import xorBuffers

# Attack CTR mode with a reused nonce (or OFB with a static IV)
#
# Both ciphertexts were produced with the same keystream.  Sliding a
# known fragment of one plaintext across the XOR of the two ciphertexts
# yields, at the right offset, the matching fragment of the other
# plaintext.  Returns the candidate for every offset.
#
def CTR_TestKnownPlaintext(plaintext, ciphertext1, ciphertext2):
    ret_val = []

    p1p2 = xorBuffers(ciphertext1,ciphertext2)
    for i in range(0,len(p1p2)-len(plaintext)+1):
        ret_val.append(bytes(xorBuffers(p1p2[i:i+len(plaintext)], plaintext)))

    return ret_val


def CTR_RecoverKeystream(plaintext, ciphertext):
    return bytes(xorBuffers(plaintext, ciphertext))


def CTR_DecryptWithEdit(editOracle, ciphertext):
    '''
    Decrypts CTR ciphertext given an oracle that rewrites plaintext in
    place: editOracle(ciphertext, offset, newtext) -> new ciphertext.
    Overwriting everything with zero bytes makes the oracle hand back the
    raw keystream.
    '''
    keystream = editOracle(ciphertext, 0, b'\x00'*len(ciphertext))
    return bytes(xorBuffers(ciphertext, keystream))
