"""
Import validation tests.

These tests ensure all modules can be imported successfully, catching
issues like missing dependencies or circular imports BEFORE deployment.

Run with: pytest tests/unit/test_imports.py -v
"""

import importlib
import sys
from pathlib import Path

import pytest


# Add src to path to simulate Lambda environment
SRC_PATH = Path(__file__).parent.parent.parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


class TestHandlerImports:
    """Verify all handler modules can be imported without errors."""

    @pytest.mark.parametrize("module_name, attribute", [
        ("handlers.main", "lambda_handler"),
        ("handlers.health_check", "lambda_handler"),
        ("handlers.customers", "list_customers"),
        ("handlers.meetings", "list_meetings"),
        ("handlers.bulk_upload", "upload_customers"),
        ("handlers.dependencies", "get_store"),
    ])
    def test_handler_import(self, module_name: str, attribute: str):
        """Each handler module should import without errors."""
        try:
            module = importlib.import_module(module_name)
            assert hasattr(module, attribute), f"{module_name} missing {attribute}"
        except ImportError as e:
            pytest.fail(f"Failed to import {module_name}: {e}")


class TestServiceImports:
    """Verify all service modules can be imported."""

    @pytest.mark.parametrize("module_name", [
        "services.customer_service",
        "services.meeting_service",
        "services.import_service",
        "services.last_meeting",
        "services.upload_decoder",
    ])
    def test_service_import(self, module_name: str):
        """Each service module should import without errors."""
        try:
            importlib.import_module(module_name)
        except ImportError as e:
            pytest.fail(f"Failed to import {module_name}: {e}")


class TestModelImports:
    """Verify all model and repository modules can be imported."""

    @pytest.mark.parametrize("module_name", [
        "models",
        "models.common",
        "models.customer",
        "models.meeting",
        "models.imports",
        "repositories",
        "repositories.base",
        "repositories.memory_repo",
        "repositories.dynamodb_repo",
    ])
    def test_model_import(self, module_name: str):
        """Each model module should import without errors."""
        try:
            importlib.import_module(module_name)
        except ImportError as e:
            pytest.fail(f"Failed to import {module_name}: {e}")


class TestUtilImports:
    """Verify all utility modules can be imported."""

    @pytest.mark.parametrize("module_name", [
        "utils.logging_config",
        "utils.error_handling",
        "utils.http",
        "utils.settings",
        "utils.validators",
    ])
    def test_util_import(self, module_name: str):
        """Each utility module should import without errors."""
        try:
            importlib.import_module(module_name)
        except ImportError as e:
            pytest.fail(f"Failed to import {module_name}: {e}")


class TestNoSrcPrefix:
    """Ensure no modules use 'from src.' imports (breaks in Lambda)."""

    @pytest.mark.parametrize("package", ["handlers", "services", "models", "repositories", "utils"])
    def test_no_src_prefix(self, package: str):
        """Source files should not have 'from src.' imports."""
        for py_file in (SRC_PATH / package).glob("*.py"):
            content = py_file.read_text()
            assert "from src." not in content, f"{py_file.name} contains 'from src.' import"
            assert "import src." not in content, f"{py_file.name} contains 'import src.' import"
