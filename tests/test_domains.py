from tasklic.client.domains import candidate_domains, is_dev_domain, strip_protocol


def test_strip_protocol() -> None:
    assert strip_protocol("https://app.example.com/") == "app.example.com"
    assert strip_protocol("http://app.example.com") == "app.example.com"
    assert strip_protocol("app.example.com") == "app.example.com"
    assert strip_protocol("") is None
    assert strip_protocol(None) is None


def test_candidates_in_priority_order() -> None:
    candidates = candidate_domains(
        "https://tenant.example.com",
        "https://portal.example.org/",
        fallbacks=["example.com", "com"],
    )
    assert candidates == [
        "https://tenant.example.com",
        "tenant.example.com",
        "portal.example.org",
        "example.com",
        "com",
    ]


def test_dev_subdomain_goes_first() -> None:
    candidates = candidate_domains(
        "https://my-app.worker.dev-host.io",
        "https://portal.example.org",
        dev_markers=[".dev-host.io"],
    )
    assert candidates[0] == "my-app.worker.dev-host.io"
    assert candidates[1] == "https://my-app.worker.dev-host.io"
    assert candidates[2] == "portal.example.org"


def test_duplicates_and_empties_dropped() -> None:
    candidates = candidate_domains(
        "app.example.com",
        "https://app.example.com",
        fallbacks=["", "app.example.com", "example.com"],
    )
    assert candidates == ["app.example.com", "example.com"]


def test_missing_base_url() -> None:
    assert candidate_domains("https://a.example.com") == [
        "https://a.example.com",
        "a.example.com",
    ]


def test_is_dev_domain_is_case_insensitive() -> None:
    assert is_dev_domain("APP.DEV-HOST.IO", [".dev-host.io"])
    assert not is_dev_domain("app.example.com", [".dev-host.io"])
    assert not is_dev_domain("app.example.com", [""])
