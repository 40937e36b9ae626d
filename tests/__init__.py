"""Tests for pkgroot."""
