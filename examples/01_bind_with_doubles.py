#!/usr/bin/env python3
"""Example: rebinding an Elastic IP with in-memory capabilities

Runs the Binder against an in-memory address directory and metadata client,
showing the detach-then-attach sequence without touching AWS.

Usage:
    python examples/01_bind_with_doubles.py

Requirements:
    pip install aws-eip-binding
"""
from __future__ import annotations

import logging

import eip_binding
from eip_binding import (
    Address,
    AddressDirectory,
    AttachmentPoint,
    Binder,
    CancelScope,
    MetadataClient,
)


class MemoryDirectory(AddressDirectory):
    def __init__(self) -> None:
        self.address = Address("54.162.153.80", "eipalloc-111", "eipassoc-old")

    def lookup_address(self, public_ip: str, scope: CancelScope) -> list[Address]:
        return [self.address] if public_ip == self.address.public_ip else []

    def detach(self, association_id: str, scope: CancelScope) -> None:
        print(f"  detach {association_id}")
        self.address = Address(self.address.public_ip, self.address.allocation_id)

    def find_attachment_points(self, public_ip: str, scope: CancelScope) -> list[AttachmentPoint]:
        return [AttachmentPoint("eni-aaa")]

    def attach(self, allocation_id: str, network_interface_id: str, scope: CancelScope) -> str:
        print(f"  attach {allocation_id} -> {network_interface_id}")
        self.address = Address(self.address.public_ip, allocation_id, "eipassoc-new")
        return "eipassoc-new"


class MemoryMetadata(MetadataClient):
    def get_token(self) -> str:
        return "tok"

    def get_metadata(self, token: str, path: str) -> str:
        return {"meta-data/public-ipv4": "10.0.0.1", "meta-data/instance-id": "i-myinst"}[path]


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    print(f"aws-eip-binding version: {eip_binding.__version__}")

    directory = MemoryDirectory()
    binder = Binder(directory, MemoryMetadata())

    # First run moves the address; its previous association is removed first.
    result = binder.bind("54.162.153.80", CancelScope(timeout=30))
    print(f"First run: already_bound={result.already_bound} association={result.association_id}")

    # A host whose public IP now is the EIP sees nothing to do.
    class ReboundMetadata(MemoryMetadata):
        def get_metadata(self, token: str, path: str) -> str:
            if path == "meta-data/public-ipv4":
                return "54.162.153.80"
            return super().get_metadata(token, path)

    result = Binder(directory, ReboundMetadata()).bind("54.162.153.80")
    print(f"Second run: already_bound={result.already_bound} instance={result.instance_id}")


if __name__ == "__main__":
    main()
