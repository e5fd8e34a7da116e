#!/usr/bin/env python3
"""
Tests for the refscout MCP server and its error responses.
"""

import asyncio
import shutil
import sys
import tempfile
import unittest
from pathlib import Path

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).parent))

from git_fixtures import add_remote, commit_file, init_bare, init_repo
from refscout.config import Config
from refscout.errors import ErrorHandler
from refscout.git_refs.error_types import (
    ErrorCategory as GitErrorCategory, NoRemoteConfigured, NotAVersionControlRepository, RemoteUnreachable
)
from refscout.server import find_local_only_refs_tool, initialize_server


class ServerTestCase(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.repo = init_repo(self.temp_dir / "work")
        add_remote(self.repo, "origin", init_bare(self.temp_dir / "origin.git"))
        commit_file(self.repo, "a.txt", "a\n")
        self.repo.git.tag("v0.1")
        self.config = Config(git_retry_attempts=1, git_retry_delay=0.0)

    def tearDown(self):
        self.repo.close()
        shutil.rmtree(self.temp_dir, ignore_errors=True)


class TestFindLocalOnlyRefsTool(ServerTestCase):

    def test_success_response(self):
        response = find_local_only_refs_tool(self.config, self.repo.working_tree_dir)

        self.assertTrue(response["success"])
        self.assertEqual(response["operation"], "find_local_only_refs")
        data = response["data"]
        self.assertEqual(list(data["categories"]), ["branches", "tags", "stashes"])
        self.assertEqual([tag["name"] for tag in data["categories"]["tags"]["local_only"]], ["v0.1"])
        self.assertIn("Tag: v0.1", data["text"])

    def test_category_and_limit_arguments(self):
        response = find_local_only_refs_tool(
            self.config, self.repo.working_tree_dir, categories=["tags"], limit=0
        )

        tags = response["data"]["categories"]["tags"]
        self.assertEqual((tags["evaluated"], tags["total"]), (0, 1))

    def test_omitted_limit_keeps_configured_limit(self):
        self.repo.git.tag("v0.2")
        config = Config(git_retry_attempts=1, git_retry_delay=0.0, limit=1)

        response = find_local_only_refs_tool(config, self.repo.working_tree_dir, categories=["tags"])

        tags = response["data"]["categories"]["tags"]
        self.assertEqual((tags["evaluated"], tags["total"]), (1, 2))

    def test_invalid_category(self):
        response = find_local_only_refs_tool(self.config, self.repo.working_tree_dir, categories=["remotes"])

        self.assertEqual(response["error_code"], "VALIDATION_INVALID_CATEGORY")
        self.assertEqual(response["category"], "validation")

    def test_invalid_mode(self):
        response = find_local_only_refs_tool(self.config, self.repo.working_tree_dir, mode="fuzzy")

        self.assertEqual(response["error_code"], "VALIDATION_INVALID_MODE")

    def test_negative_limit(self):
        response = find_local_only_refs_tool(self.config, self.repo.working_tree_dir, limit=-3)

        self.assertEqual(response["error_code"], "VALIDATION_INVALID_LIMIT")

    def test_not_a_repository(self):
        plain = self.temp_dir / "plain"
        plain.mkdir()

        response = find_local_only_refs_tool(self.config, str(plain))

        self.assertEqual(response["error_code"], "NOT_A_REPOSITORY")
        self.assertEqual(response["context"]["repository_path"], str(plain))
        self.assertTrue(response["context"]["resolution_steps"])


class TestErrorHandler(unittest.TestCase):

    def setUp(self):
        self.handler = ErrorHandler()

    def test_configuration_errors(self):
        for error, code in (
            (NotAVersionControlRepository("/tmp/x"), "NOT_A_REPOSITORY"),
            (NoRemoteConfigured(["upstream", "origin"]), "NO_REMOTE_CONFIGURED"),
        ):
            with self.subTest(code=code):
                response = self.handler.handle_reconcile_error(error, {"repository_path": "/tmp/x"})
                self.assertEqual(response.error_code, code)
                self.assertEqual(response.category, "configuration")

    def test_unreachable_remote_carries_resolution_steps(self):
        error = RemoteUnreachable("origin", 3, "Could not resolve host", GitErrorCategory.NETWORK)

        response = self.handler.handle_reconcile_error(error).to_dict()

        self.assertEqual(response["error_code"], "REMOTE_UNREACHABLE")
        self.assertEqual(response["category"], "reconciliation")
        self.assertTrue(response["context"]["resolution_steps"])

    def test_system_and_unexpected_errors(self):
        self.assertEqual(
            self.handler.handle_reconcile_error(PermissionError("denied")).error_code,
            "SYSTEM_IO_ERROR"
        )
        self.assertEqual(
            self.handler.handle_reconcile_error(RuntimeError("boom")).error_code,
            "RECONCILE_GENERAL_ERROR"
        )


class TestServerInitialization(unittest.TestCase):

    def test_tool_is_registered(self):
        server = initialize_server(Config())

        tools = asyncio.run(server.list_tools())

        self.assertEqual([tool.name for tool in tools], ["find_local_only_refs"])
        self.assertIn("repository_path", tools[0].inputSchema["properties"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
