from kickproxy.web import extract_bearer_token, mask_token


def test_mask_token() -> None:
    assert mask_token("abcdefghijklmnop") == "abcdefghij..."
    assert mask_token("short") == "short..."
    assert mask_token(None) is None


def test_extract_bearer_token() -> None:
    assert extract_bearer_token("Bearer tok") == "tok"
    assert extract_bearer_token("bearer  tok ") == "tok"
    assert extract_bearer_token("Basic abc") is None
    assert extract_bearer_token("Bearer ") is None
    assert extract_bearer_token(None) is None
