"""Tests for the Imperium tracker."""
