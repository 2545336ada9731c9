'''
Hex and base64 decoding for ciphertexts and secrets as they arrive from
files, cookies and URLs, before any cryptographic work is done on them.

Copyright (C) 2011-2012 Virtual Security Research, LLC
Author: Timothy D. Morgan, Jason A. Donenfeld
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

import base64
import binascii
from .Exceptions import DecodeError


def _compact(blob):
    '''Encoded input as a str with all whitespace (line wrapping) removed.'''
    if isinstance(blob, (bytes, bytearray)):
        try:
            blob = blob.decode('ascii')
        except UnicodeDecodeError:
            raise DecodeError("Encoded blob contains non-ASCII bytes")
    return ''.join(blob.split())


def _raw(blob):
    if isinstance(blob, str):
        return blob.encode('utf-8')
    return bytes(blob)


class Base64Codec(object):
    # dialect -> the two non-alphanumeric characters of the alphabet
    alphabets = {'rfc3548':'+/', 'filename':'+-', 'url1':'-_'}

    def __init__(self, dialect):
        alphabet,_,padding = dialect.partition('-')
        self.altchars = self.alphabets[alphabet]
        self.padded = (padding != 'nopad')

    def decode(self, blob):
        blob = _compact(blob)
        if not self.padded:
            if '=' in blob:
                raise DecodeError("Unpadded base64 string contains pad character")
            if len(blob) % 4 == 1:
                raise DecodeError("Invalid length for unpadded base64 string.")
            blob += '='*(-len(blob) % 4)

        try:
            return base64.b64decode(blob, altchars=self.altchars, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError("Invalid base64 data: %s" % e)

    def encode(self, blob):
        ret_val = base64.b64encode(_raw(blob), altchars=self.altchars.encode('ascii')).decode('ascii')
        if not self.padded:
            ret_val = ret_val.rstrip('=')
        return ret_val


class HexCodec(object):
    def __init__(self, dialect):
        self.upper = (dialect == 'upper')

    def decode(self, blob):
        try:
            return binascii.unhexlify(_compact(blob))
        except (binascii.Error, ValueError) as e:
            raise DecodeError("Invalid hex data: %s" % e)

    def encode(self, blob):
        ret_val = binascii.hexlify(_raw(blob)).decode('ascii')
        if self.upper:
            return ret_val.upper()
        return ret_val


encodings = {}
for dialect in ('mixed', 'upper', 'lower'):
    encodings['hex/'+dialect] = HexCodec(dialect)
for dialect in ('rfc3548', 'filename', 'url1'):
    encodings['base64/'+dialect] = Base64Codec(dialect)
    encodings['base64/'+dialect+'-nopad'] = Base64Codec(dialect+'-nopad')


def _lookup(encoding):
    try:
        return encodings[encoding]
    except KeyError:
        raise DecodeError("Unknown encoding: %s" % encoding)


def decode(encoding, blob):
    return _lookup(encoding).decode(blob)

def encode(encoding, blob):
    return _lookup(encoding).encode(blob)

def decodeAll(encoding, blobs):
    return [decode(encoding, b) for b in blobs]

def decodeChain(decoding_chain, blob):
    '''Applies several decodings in order, e.g. base64 wrapped around hex.'''
    for decoding in decoding_chain:
        blob = decode(decoding, blob)
    return blob

def encodeChain(encoding_chain, blob):
    for encoding in encoding_chain:
        blob = encode(encoding, blob)
    return blob
