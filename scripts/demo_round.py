#!/usr/bin/env python3
"""Simulate one sync round between Alice and Bob and print what Alice would send."""
import logging

import distbf


def run():
    logging.basicConfig(level=logging.DEBUG)

    peer_pk = b"bob_public_key_32_bytes_long!!!!"
    seed = distbf.derive_round_seed(peer_pk, 1)

    shared = [f"event-{i}".encode() for i in range(100)]
    alice_events = shared + [f"alice-{i}".encode() for i in range(10)]
    bob_events = shared + [f"bob-{i}".encode() for i in range(5)]

    # Bob builds his filter for the round and ships it
    bob = distbf.new_dbf(len(bob_events), 0.01, seed)
    for event_id in bob_events:
        bob.add(event_id)
    envelope = bob.to_bytes()
    print(f"Bob's envelope: {len(envelope)} bytes for {len(bob_events)} events")

    # Alice decodes it and plans what to send
    received = distbf.decode(envelope)
    alice = distbf.new_dbf(len(bob_events), 0.01, seed)
    for event_id in alice_events:
        alice.add(event_id)

    plan = distbf.plan_sync(alice, received.bit_array, alice_events, foreign_chain=received.chain)
    print(f"Direction: {plan.direction} (only_local={plan.only_local}, only_peer={plan.only_peer})")
    print(f"Alice sends {len(plan.missing)} events:")
    for event_id in plan.missing:
        print(f"  {event_id.decode()}")


if __name__ == '__main__':
    run()
