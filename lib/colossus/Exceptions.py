'''
Exceptions raised by the mode engine, the oracles and the attacks.

Copyright (C) 2010 ELOI SANFÈLIX
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

__all__ = ['ColossusError', 'InvalidBlockError', 'PaddingError',
           'SearchExhaustedError', 'InvalidPlaintextError', 'DecodeError']


class ColossusError(Exception):
    pass


class InvalidBlockError(ColossusError):
    '''
    A key, IV, nonce or block had the wrong length.  This is a caller
    bug, not bad input, and is never retried.
    '''
    def __init__(self, expectedSize, receivedSize, what='block'):
        self.expected = expectedSize
        self.received = receivedSize
        self.what = what
        super(InvalidBlockError, self).__init__(str(self))

    def __str__(self):
        return "Invalid %s size: %d bytes. Must be %d bytes long." % (self.what, self.received, self.expected)


class PaddingError(ColossusError):
    '''
    Raised when PKCS#7 padding does not validate.  Deliberately carries no
    detail about which check failed.
    '''
    def __init__(self):
        super(PaddingError, self).__init__("Invalid padding")


class SearchExhaustedError(ColossusError):
    '''
    An attack tried every candidate without a match.  Either the oracle
    changed behaviour mid-attack or an assumption about it is wrong.
    '''
    pass


class InvalidPlaintextError(ColossusError):
    '''
    Raised by a validator that rejects decrypted messages with high-bit
    bytes.  The offending plaintext travels with the error.
    '''
    def __init__(self, plaintext):
        self.plaintext = plaintext
        super(InvalidPlaintextError, self).__init__("Invalid plaintext: %r" % (plaintext,))


class DecodeError(ColossusError):
    pass
