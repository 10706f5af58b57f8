# SPDX-License-Identifier: Apache-2.0
"""
Puffer SDK tests.

Unit tests for the request compilers and response normalizer, orchestrator
tests against an in-memory transport, and respx-mocked HTTP tests for the
transport, client and CLI.
"""
