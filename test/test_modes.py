import os

import pytest
from Crypto.Cipher import AES
from Crypto.Util.Padding import pad

from colossus import blobtools, cipher, modes
from colossus.Exceptions import InvalidBlockError, PaddingError

KEY = b'YELLOW SUBMARINE'


def test_block_primitive_fips197_vector():
    key = bytes(range(16))
    plaintext = bytes.fromhex('00112233445566778899aabbccddeeff')
    ciphertext = bytes.fromhex('69c4e0d86a7b0430d8cdb78070b4c55a')
    assert cipher.encryptBlock(key, plaintext) == ciphertext
    assert cipher.decryptBlock(key, ciphertext) == plaintext


@pytest.mark.parametrize('key,block', [
    (b'short key', b'\x00'*16),
    (KEY, b'\x00'*15),
    (KEY, b'\x00'*17),
])
def test_block_primitive_preconditions(key, block):
    with pytest.raises(InvalidBlockError):
        cipher.encryptBlock(key, block)


def test_ecb_matches_reference():
    plaintext = b"I'm back and I'm ringin' the bell"
    expected = AES.new(KEY, AES.MODE_ECB).encrypt(pad(plaintext, 16))
    assert modes.encryptECB(KEY, plaintext) == expected
    assert modes.decryptECB(KEY, expected) == plaintext


def test_ecb_is_deterministic_per_block():
    ciphertext = modes.encryptECB(KEY, b'A'*32)
    assert ciphertext[0:16] == ciphertext[16:32]


def test_cbc_matches_reference():
    iv = os.urandom(16)
    plaintext = b'A rockin\' on the mike while the fly girls yell'
    expected = AES.new(KEY, AES.MODE_CBC, iv).encrypt(pad(plaintext, 16))
    assert modes.encryptCBC(KEY, iv, plaintext) == expected
    assert modes.decryptCBC(KEY, iv, expected) == plaintext


@pytest.mark.parametrize('length', [0, 1, 15, 16, 17, 32, 100])
def test_ecb_cbc_round_trip(length):
    key = cipher.randomKey()
    iv = os.urandom(16)
    plaintext = os.urandom(length)
    assert modes.decryptECB(key, modes.encryptECB(key, plaintext)) == plaintext
    assert modes.decryptCBC(key, iv, modes.encryptCBC(key, iv, plaintext)) == plaintext


def test_cbc_bit_flip_propagates_to_next_block():
    iv = b'\x00'*16
    plaintext = b'A'*48
    ciphertext = bytearray(modes.encryptCBC(KEY, iv, plaintext))
    ciphertext[3] ^= 0x01
    decrypted = modes.decryptCBC(KEY, iv, bytes(ciphertext))
    assert decrypted[16:32] == b'AAA@' + b'A'*12
    assert decrypted[32:48] == b'A'*16


def test_cbc_bad_padding_raises():
    iv = bytearray(os.urandom(16))
    ciphertext = modes.encryptCBC(KEY, bytes(iv), b'A'*15)
    # Final byte was \x01; make it decrypt to \x00
    iv[15] ^= 0x01
    with pytest.raises(PaddingError):
        modes.decryptCBC(KEY, bytes(iv), ciphertext)


def test_cbc_preconditions():
    with pytest.raises(InvalidBlockError):
        modes.encryptCBC(KEY, b'\x00'*8, b'data')
    with pytest.raises(InvalidBlockError):
        modes.decryptCBC(KEY, b'\x00'*16, b'\x00'*20)
    with pytest.raises(InvalidBlockError):
        modes.decryptECB(KEY, b'')


def test_ctr_known_vector():
    ciphertext = blobtools.decode('base64/rfc3548',
        'L77na/nrFsKvynd6HzOoG7GHTLXsTVu9qvY/2syLXzhPweyyMTJULu/6/kXX0KSvoOLSFQ==')
    plaintext = modes.decryptCTR(KEY, b'\x00'*8, ciphertext)
    assert plaintext == b"Yo, VIP Let's kick it Ice, Ice, baby Ice, Ice, baby "


def test_ctr_counter_layout():
    nonce = os.urandom(8)
    stream = modes.ctrKeystream(KEY, nonce, 48)
    aes = AES.new(KEY, AES.MODE_ECB)
    assert stream[0:16] == aes.encrypt(nonce + b'\x00'*8)
    assert stream[16:32] == aes.encrypt(nonce + b'\x01' + b'\x00'*7)
    assert stream[32:48] == aes.encrypt(nonce + b'\x02' + b'\x00'*7)


@pytest.mark.parametrize('length', [0, 1, 15, 16, 17, 33, 100])
def test_ctr_round_trip(length):
    key = cipher.randomKey()
    nonce = os.urandom(8)
    plaintext = os.urandom(length)
    ciphertext = modes.encryptCTR(key, nonce, plaintext)
    assert len(ciphertext) == length
    assert modes.decryptCTR(key, nonce, ciphertext) == plaintext


def test_ctr_offset_matches_stream_position():
    nonce = os.urandom(8)
    data = os.urandom(70)
    full = modes.cryptCTR(KEY, nonce, data)
    for offset in (1, 15, 16, 21, 69):
        assert modes.cryptCTR(KEY, nonce, data[offset:], offset) == full[offset:]


def test_ctr_nonce_precondition():
    with pytest.raises(InvalidBlockError):
        modes.cryptCTR(KEY, b'\x00'*16, b'data')
