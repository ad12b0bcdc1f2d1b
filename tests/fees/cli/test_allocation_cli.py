"""Tests for the fee allocation CLI - Typer commands with CliRunner."""

import json

import pytest
from typer.testing import CliRunner

from schoolpay import __version__
from schoolpay.cli.main import app as root_app
from schoolpay.exceptions import FileFormatError
from schoolpay.fees.cli import app
from schoolpay.fees.cli.allocation_cli import load_assignments

runner = CliRunner()

INCONSISTENT_ITEM = {
    "categoryId": "tuition",
    "categoryName": "Tuition",
    "balance": 100,
    "amount": 500,
    "amountPaid": 100,
}


def write_assignments(tmp_path, payload, name="assignments.json"):
    path = tmp_path / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.fixture
def assignments_file(tmp_path):
    """Stored assignment with mandatory tuition (20,000) and optional uniform (5,000)."""
    return write_assignments(
        tmp_path,
        {
            "feeAssignments": [
                {
                    "id": "assign-001",
                    "studentId": "stu-001",
                    "studentName": "Ada Obi",
                    "feeItems": [
                        {
                            "categoryId": "uniform",
                            "categoryName": "Uniform",
                            "type": "uniform",
                            "balance": 5000,
                        },
                        {
                            "categoryId": "tuition",
                            "categoryName": "Tuition",
                            "type": "tuition",
                            "balance": 20000,
                            "isMandatory": True,
                        },
                    ],
                }
            ]
        },
    )


class TestLoadAssignments:
    def test_wrapped_document(self, assignments_file):
        (assignment,) = load_assignments(assignments_file)

        assert assignment.student_name == "Ada Obi"
        assert [item.category_id for item in assignment.fee_items] == ["uniform", "tuition"]

    def test_plain_list(self, tmp_path):
        path = write_assignments(tmp_path, [])

        assert load_assignments(path) == []

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{feeAssignments: ", encoding="utf-8")

        with pytest.raises(FileFormatError, match="could not be read as JSON"):
            load_assignments(path)

    def test_inconsistent_line_item(self, tmp_path):
        path = write_assignments(tmp_path, [{"feeItems": [INCONSISTENT_ITEM]}])

        with pytest.raises(FileFormatError, match="inconsistent line item") as exc_info:
            load_assignments(path)

        assert isinstance(exc_info.value.original_error, ValueError)

    def test_wrong_structure(self, tmp_path):
        path = write_assignments(tmp_path, {"students": []})

        with pytest.raises(FileFormatError, match="does not match the expected structure"):
            load_assignments(path)


class TestAllocateCommand:
    """Tests for 'allocate' CLI command."""

    def test_auto_allocation_prefers_mandatory(self, assignments_file):
        result = runner.invoke(app, ["allocate", str(assignments_file), "--amount", "18000"])

        assert result.exit_code == 0
        assert "Payment Allocation" in result.stdout
        assert "₦18,000.00" in result.stdout
        assert "Mode: auto" in result.stdout
        assert "Allocation matches the payment amount" in result.stdout

    def test_json_output(self, assignments_file):
        result = runner.invoke(
            app, ["allocate", str(assignments_file), "--amount", "22,000", "--json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["is_valid"] is True
        assert data["state"] == "outstanding"
        assert data["remaining"] == "0.00"
        assert [(a["category_id"], a["amount"]) for a in data["allocations"]] == [
            ("tuition", "20000.00"),
            ("uniform", "2000.00"),
        ]

    def test_json_output_exits_nonzero_when_unbalanced(self, assignments_file):
        result = runner.invoke(
            app, ["allocate", str(assignments_file), "--amount", "30000", "--json"]
        )

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["is_valid"] is False
        assert data["remaining"] == "5000.00"

    def test_manual_under_allocation(self, assignments_file):
        result = runner.invoke(
            app,
            [
                "allocate",
                str(assignments_file),
                "-a",
                "25000",
                "--clear",
                "-m",
                "tuition=20000",
            ],
        )

        assert result.exit_code == 1
        assert "Mode: manual" in result.stdout
        assert "remaining" in result.stdout
        assert "₦5,000.00" in result.stdout

    def test_manual_over_allocation(self, assignments_file):
        result = runner.invoke(
            app,
            ["allocate", str(assignments_file), "-a", "10000", "-m", "tuition=15000"],
        )

        assert result.exit_code == 1
        assert "reduce" in result.stdout
        assert "₦5,000.00" in result.stdout

    def test_max_buttons_balance_payment(self, assignments_file):
        result = runner.invoke(
            app,
            [
                "allocate",
                str(assignments_file),
                "-a",
                "25000",
                "--clear",
                "--max",
                "tuition",
                "--max",
                "uniform",
            ],
        )

        assert result.exit_code == 0
        assert "Mode: manual" in result.stdout
        assert "Allocation matches the payment amount" in result.stdout

    def test_no_assignments(self, tmp_path):
        path = write_assignments(tmp_path, [])

        result = runner.invoke(app, ["allocate", str(path), "--amount", "5000"])

        assert result.exit_code == 0
        assert "No Fee Assignments Found" in result.stdout

    def test_all_fees_paid(self, tmp_path):
        path = write_assignments(
            tmp_path,
            [{"feeItems": [{"categoryId": "tuition", "categoryName": "Tuition", "balance": 0}]}],
        )

        result = runner.invoke(app, ["allocate", str(path), "--amount", "5000"])

        assert result.exit_code == 0
        assert "All Fees Paid" in result.stdout

    def test_settled_json_is_not_a_failure(self, tmp_path):
        path = write_assignments(
            tmp_path,
            [{"feeItems": [{"categoryId": "tuition", "categoryName": "Tuition", "balance": 0}]}],
        )

        result = runner.invoke(app, ["allocate", str(path), "--amount", "5000", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["state"] == "settled"

    @pytest.mark.parametrize(
        ("extra_args", "message"),
        [
            (["--amount", "lots"], "Amount must be numeric"),
            (["--amount", "1e30"], "Amount is too large"),
            (["--amount", "100", "-m", "tuition"], "Manual allocations must look like"),
            (["--amount", "100", "-m", "tuition=abc"], "Amount must be numeric"),
        ],
    )
    def test_bad_input_exits_with_2(self, assignments_file, extra_args, message):
        result = runner.invoke(app, ["allocate", str(assignments_file), *extra_args])

        assert result.exit_code == 2
        assert message in result.stdout
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_inconsistent_line_item_exits_with_2(self, tmp_path):
        path = write_assignments(tmp_path, [{"feeItems": [INCONSISTENT_ITEM]}])

        result = runner.invoke(app, ["allocate", str(path), "--amount", "100"])

        assert result.exit_code == 2
        assert "inconsistent line item" in result.stdout

    def test_unreadable_file_exits_with_2(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("not json", encoding="utf-8")

        result = runner.invoke(app, ["allocate", str(path), "--amount", "100"])

        assert result.exit_code == 2
        assert "could not be read as JSON" in result.stdout


class TestRootApp:
    def test_version(self):
        result = runner.invoke(root_app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_fees_group_is_mounted(self, assignments_file):
        result = runner.invoke(
            root_app, ["fees", "allocate", str(assignments_file), "--amount", "25000"]
        )

        assert result.exit_code == 0
        assert "Allocation matches the payment amount" in result.stdout
