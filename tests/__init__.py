"""Test suite for PSLLM."""
