"""
TLD Registry - static endpoint tables.

FALLBACK_RDAP_SERVERS is the safety floor used when the IANA bootstrap
document cannot be fetched; it is merged under the bootstrap data when it
can. LEGACY_WHOIS_SERVERS lists TLDs whose WHOIS server is queried
explicitly instead of relying on the whois client's default routing.

RDAP base URLs carry no trailing slash; queries append "/domain/<name>".
"""

# ============================================================================
# RDAP - known-good registry endpoints
# ============================================================================
FALLBACK_RDAP_SERVERS: dict[str, str] = {
    # Verisign
    "com": "https://rdap.verisign.com/com/v1",
    "net": "https://rdap.verisign.com/net/v1",
    # Public Interest Registry
    "org": "https://rdap.publicinterestregistry.org/rdap",
    # Identity Digital
    "info": "https://rdap.identitydigital.services/rdap",
    "ai": "https://rdap.identitydigital.services/rdap",
    "bio": "https://rdap.identitydigital.services/rdap",
    "live": "https://rdap.identitydigital.services/rdap",
    "software": "https://rdap.identitydigital.services/rdap",
    "studio": "https://rdap.identitydigital.services/rdap",
}


# ============================================================================
# WHOIS - TLDs without reliable RDAP
# ============================================================================
LEGACY_WHOIS_SERVERS: dict[str, str] = {
    "io": "whois.nic.io",
    "co": "whois.nic.co",
    "me": "whois.nic.me",
    "tv": "whois.nic.tv",
    "cc": "whois.nic.cc",
    "app": "whois.nic.google",
}
