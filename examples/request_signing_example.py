#!/usr/bin/env python3
"""
Chef API Python SDK - Request Signing Example

This example shows how a Chef API request is authenticated: the canonical
string is signed with the client's RSA key and the signature is carried in
numbered X-Ops-Authorization headers.
"""

import json
import time
import sys
import os

# Add src to path for development
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from cryptography.hazmat.primitives.asymmetric import rsa

from chefapi_sdk import (
    # Key material
    RSAPrivateKey,
    # Request signing
    RequestAuthorizer,
    verify_authorization,
    # HTTP integration
    connect_credentials,
    ChefClient,
    # Errors
    ContentTooLongError,
    SigningError,
)
from chefapi_sdk.crypto import from_private_numbers

FIXED_TIMESTAMP = "2024-01-02T15:04:05Z"


def generate_demo_key() -> RSAPrivateKey:
    """Throwaway 2048-bit key; real clients load the .pem issued by the server"""
    return from_private_numbers(rsa.generate_private_key(public_exponent=65537, key_size=2048))


def basic_signing_example(key: RSAPrivateKey):
    """Sign a single request and inspect the result"""
    print("=== Basic Request Signing Example ===")

    authorizer = RequestAuthorizer(key, "example-client", "11.12.0")
    result = authorizer.authorize("GET", "/organizations/acme/nodes", "", FIXED_TIMESTAMP)

    print("1. Canonical string:")
    for line in result.canonical_string.split("\n"):
        print(f"   {line}")

    print("\n2. Headers:")
    for name, value in result.headers.items():
        print(f"   {name}: {value}")

    print(f"\n3. Signature spans {len(result.signature_lines)} authorization headers")

    valid = verify_authorization(key, result.headers, "GET", "/organizations/acme/nodes")
    print(f"4. Server-side check: {'valid' if valid else 'INVALID'}")


def body_signing_example(key: RSAPrivateKey):
    """The content hash covers the exact body that is sent"""
    print("\n=== Body Signing Example ===")

    authorizer = RequestAuthorizer(key, "example-client", "11.12.0")
    body = json.dumps({"name": "web1", "chef_environment": "production"})
    headers = authorizer.headers("POST", "/organizations/acme/nodes", body, FIXED_TIMESTAMP)

    print(f"   x-ops-content-hash: {headers['x-ops-content-hash']}")
    print(f"   Same body verifies: {verify_authorization(key, headers, 'POST', '/organizations/acme/nodes', body)}")
    print(f"   Changed body verifies: {verify_authorization(key, headers, 'POST', '/organizations/acme/nodes', '{}')}")


def http_integration_example(key: RSAPrivateKey):
    """Build a signed request with the HTTP client without sending it"""
    print("\n=== HTTP Integration Example ===")

    context = connect_credentials("chef.example.com", "443", "11.12.0", "example-client", key)
    with ChefClient(context) as client:
        prepared = client.generate_request("GET", "organizations/acme/search/node", {"q": "role:web"})
        print(f"   {prepared.method} {prepared.url}")
        print(f"   X-Ops-UserId: {prepared.headers['X-Ops-UserId']}")
        print(f"   X-Ops-Authorization-1: {prepared.headers['X-Ops-Authorization-1'][:20]}...")


def performance_benchmark(key: RSAPrivateKey):
    """Measure signing throughput"""
    print("\n=== Performance Benchmark ===")

    authorizer = RequestAuthorizer(key, "example-client", "11.12.0")
    iterations = 200
    start = time.perf_counter()
    for i in range(iterations):
        authorizer.headers("GET", f"/organizations/acme/nodes/node{i}", "")
    elapsed = time.perf_counter() - start

    print(f"   {iterations} signatures in {elapsed * 1000:.1f}ms ({elapsed / iterations * 1000:.2f}ms each)")


def error_handling_example(key: RSAPrivateKey):
    """Show the errors signing can raise"""
    print("\n=== Error Handling Example ===")

    authorizer = RequestAuthorizer(key, "example-client", "11.12.0")

    try:
        authorizer.headers("GET", "/nodes", "", "yesterday")
    except SigningError as e:
        print(f"   Invalid timestamp: {type(e).__name__}: {e}")

    try:
        authorizer.headers("FETCH", "/nodes", "")
    except SigningError as e:
        print(f"   Invalid method: {type(e).__name__}: {e}")

    small_key = from_private_numbers(rsa.generate_private_key(public_exponent=65537, key_size=1024))
    try:
        RequestAuthorizer(small_key, "example-client", "11.12.0").headers(
            "GET", "/organizations/acme/nodes", ""
        )
    except ContentTooLongError as e:
        print(f"   Key too small: {type(e).__name__}: {e}")


def main():
    """Run all examples"""
    print("Chef API Python SDK - Request Signing Examples")
    print("=" * 50)

    try:
        key = generate_demo_key()

        basic_signing_example(key)
        body_signing_example(key)
        http_integration_example(key)
        performance_benchmark(key)
        error_handling_example(key)

        print("\n\n=== All Examples Completed Successfully! ===")

    except Exception as e:
        print(f"\nExample failed: {type(e).__name__}: {e}")
        import traceback
        traceback.print_exc()


if __name__ == "__main__":
    main()
