"""Import checks for the public package surface."""

import importlib

import pytest

import account_recon


class TestPackage:
    """Tests that every module of the package loads."""

    @pytest.mark.parametrize(
        "module",
        [
            "account_recon.cli",
            "account_recon.commands",
            "account_recon.config",
            "account_recon.models",
            "account_recon.parsers",
            "account_recon.reconciliation",
            "account_recon.reports",
            "account_recon.service",
            "account_recon.storage",
            "account_recon.utils",
        ],
    )
    def test_module_imports(self, module):
        assert importlib.import_module(module) is not None

    def test_public_names(self):
        assert account_recon.__version__ == "0.1.0"
        assert account_recon.ReconciliationService.__name__ == "ReconciliationService"
