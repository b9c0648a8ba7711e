#!/usr/bin/env python3
"""Example: Quickstart

Generates a self-sovereign identity, signs and verifies a message, issues a
credential, then restores the identity from its stored form.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install sovereign-identity
"""
from __future__ import annotations

import asyncio

import sovereign_identity
from sovereign_identity import Identity


async def main() -> None:
    print(f"sovereign-identity version: {sovereign_identity.__version__}")

    # Step 1: Generate an identity
    generated = await Identity.generate("quickstart-agent")
    if generated.is_failure:
        raise SystemExit(generated.error_message)
    identity = generated.value
    print(f"DID: {identity.did[:40]}...")

    # Step 2: Sign and verify
    signature = (await identity.sign("hello")).value
    print(f"Signature valid: {(await identity.verify('hello', signature)).value}")

    # Step 3: Issue a credential to another holder
    issued = await identity.issue_credential(
        {"holder": {"id": "did:key:z6MkExampleHolder", "name": "holder"}, "role": "reviewer"},
        "ReviewerCredential",
    )
    outcome = (await identity.verify_credential(issued.value)).value
    print(f"Credential {issued.value.id} verified: {outcome.verified}")

    # Step 4: Store and restore
    restored = Identity.create(identity.to_json()).value
    print(f"Restored DID matches: {restored.did == identity.did}")

    # Step 5: Share the public projection
    print(f"Presented fields: {sorted(identity.present().to_json())}")

    print("\nQuickstart complete.")


if __name__ == "__main__":
    asyncio.run(main())
