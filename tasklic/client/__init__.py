# Remote authority access
from tasklic.client.authority import RemoteAuthorityClient as RemoteAuthorityClient
from tasklic.client.domains import candidate_domains as candidate_domains

__all__ = ["RemoteAuthorityClient", "candidate_domains"]
