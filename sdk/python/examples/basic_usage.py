#!/usr/bin/env python3
"""
Basic gitcode1s usage example.

Browses a GitCode repository through the REST API without cloning it.
Run with: python examples/basic_usage.py [/owner/repo/tree/ref/path]

Set GITCODE1S_TOKEN for private repositories or a higher rate limit.
"""

import asyncio
import logging
import sys

from gitcode1s import AsyncGitCode1sClient, GitCode1sError, configure_logging
from gitcode1s.types import CommitsQueryOptions, FileType, PageType


async def main(path: str) -> None:
    print("=== gitcode1s Basic Usage Example ===\n")

    async with AsyncGitCode1sClient.from_env() as client:
        # 1. Resolve the virtual path; refs may contain slashes
        print(f"1. Parsing {path}...")
        state = await client.router.parse_path(path)
        print(f"   Repository: {state.repo}")
        print(f"   Ref: {state.ref}")
        print(f"   Path: /{state.file_path or ''}")

        if state.page_type != PageType.TREE:
            print("   Not a tree path, nothing to list")
            return

        # 2. List the directory
        print("\n2. Listing directory...")
        directory = await client.data_source.provide_directory(
            state.repo, state.ref, state.file_path or ""
        )
        if directory is None:
            print("   Not a directory (or the provider is unreachable)")
            return
        for entry in directory.entries:
            marker = "/" if entry.type == FileType.DIRECTORY else ""
            print(f"   {entry.path}{marker}")

        # 3. Show the first file
        first_file = next((e for e in directory.entries if e.type == FileType.FILE), None)
        if first_file is not None:
            print(f"\n3. Reading {first_file.path}...")
            try:
                file = await client.data_source.provide_file(state.repo, state.ref, first_file.path)
                print(f"   {len(file.content)} bytes")
            except GitCode1sError as e:
                print(f"   Failed: {e}")

        # 4. Recent history
        print("\n4. Recent commits...")
        commits = await client.data_source.provide_commits(
            state.repo, CommitsQueryOptions(from_=state.ref, page_size=5)
        )
        for commit in commits:
            title = (commit.message or "").splitlines()[0] if commit.message else ""
            print(f"   {commit.sha[:8]} {commit.author}: {title}")

        print(f"\n   Open on GitCode: {client.router.build_external_link(path)}")


if __name__ == "__main__":
    configure_logging(level=logging.WARNING)
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "/gitcode/gitcode"))
