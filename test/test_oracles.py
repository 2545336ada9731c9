import pytest

from colossus import oracles
from colossus.Exceptions import InvalidPlaintextError


def test_escape_userdata():
    assert oracles.escapeUserdata(b';admin=true;') == b'%3Badmin%3Dtrue%3B'


def test_parse_fields():
    fields = oracles.parseFields(b'foo=bar&baz=qux&zap=zazzle&junk', b'&')
    assert fields == {b'foo':b'bar', b'baz':b'qux', b'zap':b'zazzle'}


def test_profile_for_eats_metacharacters():
    assert oracles.profileFor(b'foo@bar.com&role=admin') == b'email=foo@bar.comroleadmin&uid=10&role=user'


def test_profile_oracle_round_trip():
    oracle = oracles.ProfileOracle()
    assert oracle.role(oracle.encrypt(b'foo@bar.com')) == b'user'


def test_suffix_oracle_is_deterministic():
    oracle = oracles.ECBSuffixOracle(b'secret', prefix=b'pre')
    assert oracle.encrypt(b'abc') == oracle.encrypt(b'abc')
    assert len(oracle.encrypt(b'')) == 16


def test_random_prefix_oracle_keeps_its_prefix():
    oracle = oracles.ECBSuffixOracle.withRandomPrefix(b'secret', max_prefix=40)
    assert oracle.encrypt(b'x') == oracle.encrypt(b'x')


def test_mode_oracle_records_mode():
    oracle = oracles.ModeOracle()
    seen = set()
    for i in range(0, 64):
        oracle.encrypt(b'\x00'*48)
        seen.add(oracle.last_mode)
    assert seen == {'ECB', 'CBC'}


def test_padding_oracle_accepts_its_own_token(tokens):
    oracle = oracles.PaddingOracle(tokens)
    iv,ciphertext = oracle.token()
    assert oracle.check_padding(iv, ciphertext)

    # Drive the final byte to \x00
    forged = bytearray(ciphertext[-32:])
    for value in range(0, 256):
        forged[15] = value
        if not oracle.check_padding(iv, bytes(forged)):
            break
    else:
        pytest.fail("every value produced valid padding")


@pytest.mark.parametrize('factory', [oracles.CBCCommentOracle, oracles.CTRCommentOracle])
def test_comment_oracle_escapes_injection(factory):
    oracle = factory()
    ciphertext = oracle.encrypt(b';admin=true;')
    assert not oracle.is_admin(ciphertext)
    fields = oracle.parse(ciphertext)
    assert fields[b'userdata'] == b'%3Badmin%3Dtrue%3B'
    assert fields[b'comment1'] == b'cooking%20MCs'


def test_comment_oracle_prefix_length():
    assert oracles.CBCCommentOracle.PREFIX_LENGTH == 32


def test_iv_key_oracle_accepts_ascii():
    oracle = oracles.IVKeyOracle()
    assert oracle.check(oracle.encrypt(b'hello')) == None
    assert not oracle.verify_key(b'\x00'*16)


def test_iv_key_oracle_leaks_bad_plaintext():
    oracle = oracles.IVKeyOracle()
    ciphertext = bytearray(oracle.encrypt(b'A'*32))
    # Flipping the high bit in block 2 sets it in block 3 of the plaintext
    ciphertext[16] ^= 0x80
    with pytest.raises(InvalidPlaintextError) as e:
        oracle.check(bytes(ciphertext))
    assert e.value.plaintext[32] == ord('A') ^ 0x80


def test_ctr_edit_oracle():
    oracle = oracles.CTREditOracle(b'The quick brown fox jumps over the lazy dog')
    edited = oracle.edit(oracle.ciphertext, 4, b'QUICK')
    assert len(edited) == len(oracle.ciphertext)
    assert edited[:4] == oracle.ciphertext[:4]
    assert edited[9:] == oracle.ciphertext[9:]
    assert oracle.edit(edited, 4, b'quick') == oracle.ciphertext
    with pytest.raises(ValueError):
        oracle.edit(oracle.ciphertext, 40, b'too long')
