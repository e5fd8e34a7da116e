#!/usr/bin/env python3
"""Test runner for the refscout test modules."""

import sys
import subprocess
from pathlib import Path


def run_test(test_file: str, description: str) -> bool:
    """Run a single test file and return success status."""
    print(f"\n{'='*60}")
    print(f"Running: {description}")
    print(f"File: {test_file}")
    print('='*60)

    result = subprocess.run([sys.executable, test_file], text=True)

    success = result.returncode == 0
    print(f"\n{'PASSED' if success else 'FAILED'}: {description}")
    return success


def main():
    """Run every refscout test module in dependency order."""
    print("refscout Test Suite")
    print("="*60)

    tests = [
        ("test_config.py", "Configuration"),
        ("test_ref_enumeration.py", "Local Ref Enumeration"),
        ("test_remote_snapshot.py", "Remote Snapshots and Retries"),
        ("test_reconciliation.py", "Reconciliation"),
        ("test_report_rendering.py", "Report Rendering"),
        ("test_workspace_status.py", "Workspace Status and Batch Scan"),
        ("test_cli.py", "Command Line Interface"),
        ("test_mcp_server.py", "MCP Server"),
    ]

    root = Path(__file__).parent
    results = []
    for test_file, description in tests:
        if (root / test_file).exists():
            success = run_test(str(root / test_file), description)
            results.append((test_file, description, success))
        else:
            print(f"Test file not found: {test_file}")
            results.append((test_file, description, False))

    # Summary
    print(f"\n{'='*60}")
    print("TEST SUITE SUMMARY")
    print("="*60)

    passed = 0
    for test_file, description, success in results:
        status = "PASS" if success else "FAIL"
        print(f"{status} {description}")
        if success:
            passed += 1

    print(f"\nResults: {passed}/{len(results)} test modules passed")

    if passed != len(results):
        print(f"\n{len(results) - passed} test modules failed")
    return passed == len(results)


if __name__ == "__main__":
    try:
        sys.exit(0 if main() else 1)
    except KeyboardInterrupt:
        print("\n\nTest suite interrupted by user")
        sys.exit(1)
