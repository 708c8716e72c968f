from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local
from ..common.http import api_view, current_principal, login_required, ok, parse_body, query_int
from ..core.enums import CorrectionStatus, PayrollInputStatus, PayrollStatus, VariablePayStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .schemas import (
    ApproveVariablePayBody,
    CalculateBody,
    CreateCorrectionBody,
    CreatePayrollBody,
    CreateVariablePayBody,
    GeneratePayslipBody,
    InputStatusBody,
    PayrollStatusBody,
    ProcessBody,
    RejectVariablePayBody,
    ReviewCorrectionBody,
    UpdateInputBody,
)


def _enum_arg(enum_cls, name: str = "status"):
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        raise ValidationError(f"Unknown {name} filter")


def register(app: Flask, container: Container) -> None:
    # payroll records

    @app.route("/payroll", methods=["GET"], endpoint="list_payrolls")
    @api_view
    @login_required
    def list_payrolls():
        items = container.payroll_service.list_payrolls(
            current_principal(),
            employee_id=query_int("employee_id"),
            month=query_int("month"),
            year=query_int("year"),
            status=_enum_arg(PayrollStatus),
        )
        return ok({"payrolls": items})

    @app.route("/payroll", methods=["POST"], endpoint="create_payroll")
    @api_view
    @login_required
    def create_payroll():
        body = parse_body(CreatePayrollBody)
        payroll = container.payroll_service.create_payroll(
            current_principal(),
            employee_id=body.employee_id,
            month=body.month,
            year=body.year,
            basic_salary=body.basic_salary,
            bonus=body.bonus,
            allowances=body.allowances,
            other_deductions=body.other_deductions,
            options=body.options.to_options(),
        )
        return ok({"payroll": payroll}, message="Payroll created", status=201)

    @app.route("/payroll/<int:payroll_id>", methods=["GET"], endpoint="get_payroll")
    @api_view
    @login_required
    def get_payroll(payroll_id: int):
        return ok({"payroll": container.payroll_service.get_payroll(current_principal(), payroll_id)})

    @app.route("/payroll/<int:payroll_id>/status", methods=["POST"], endpoint="update_payroll_status")
    @api_view
    @login_required
    def update_payroll_status(payroll_id: int):
        body = parse_body(PayrollStatusBody)
        payroll = container.payroll_service.update_status(
            current_principal(), payroll_id, status=body.status, expected_version=body.version
        )
        return ok({"payroll": payroll}, message=f"Payroll marked {payroll.status.value.lower()}")

    @app.route("/payroll/<int:payroll_id>/history", methods=["GET"], endpoint="payroll_history")
    @api_view
    @login_required
    def payroll_history(payroll_id: int):
        return ok({"history": container.payroll_service.history(current_principal(), payroll_id)})

    @app.route("/payroll/calculate", methods=["POST"], endpoint="calculate_payroll")
    @api_view
    @login_required
    def calculate_payroll():
        body = parse_body(CalculateBody)
        result, report = container.payroll_service.calculate(
            current_principal(),
            employee_id=body.employee_id,
            month=body.month,
            year=body.year,
            options=body.options.to_options(),
        )
        return ok(
            {
                "calculation": result,
                "validation": {"is_valid": report.is_valid, "errors": report.errors, "warnings": report.warnings},
            }
        )

    @app.route("/payroll/process", methods=["POST"], endpoint="process_payroll")
    @api_view
    @login_required
    def process_payroll():
        body = parse_body(ProcessBody)
        outcome = container.payroll_service.process(
            current_principal(),
            month=body.month,
            year=body.year,
            employee_ids=body.employee_ids,
            options=body.options.to_options(),
        )
        return ok(
            outcome,
            message=f"Processed payroll for {outcome['processed']} of {outcome['total']} employees",
        )

    @app.route("/payroll/dashboard", methods=["GET"], endpoint="payroll_dashboard")
    @api_view
    @login_required
    def payroll_dashboard():
        today = now_local()
        data = container.payroll_service.dashboard(
            current_principal(),
            month=query_int("month") or today.month,
            year=query_int("year") or today.year,
        )
        return ok(data)

    # payroll inputs

    @app.route("/payroll/inputs", methods=["GET"], endpoint="list_payroll_inputs")
    @api_view
    @login_required
    def list_payroll_inputs():
        items = container.payroll_input_service.list_inputs(
            current_principal(),
            employee_id=query_int("employee_id"),
            month=query_int("month"),
            year=query_int("year"),
            status=_enum_arg(PayrollInputStatus),
        )
        return ok({"inputs": items})

    @app.route("/payroll/inputs/<int:input_id>", methods=["GET"], endpoint="get_payroll_input")
    @api_view
    @login_required
    def get_payroll_input(input_id: int):
        return ok({"input": container.payroll_input_service.get_input(current_principal(), input_id)})

    @app.route("/payroll/inputs/<int:input_id>", methods=["PUT"], endpoint="update_payroll_input")
    @api_view
    @login_required
    def update_payroll_input(input_id: int):
        body = parse_body(UpdateInputBody)
        item = container.payroll_input_service.update_input(
            current_principal(),
            input_id,
            changes=body.component_changes(),
            notes=body.notes,
            expected_version=body.version,
        )
        return ok({"input": item}, message="Payroll input updated")

    @app.route("/payroll/inputs/<int:input_id>/status", methods=["POST"], endpoint="update_payroll_input_status")
    @api_view
    @login_required
    def update_payroll_input_status(input_id: int):
        body = parse_body(InputStatusBody)
        item = container.payroll_input_service.change_status(
            current_principal(), input_id, status=body.status, expected_version=body.version
        )
        return ok({"input": item})

    @app.route("/payroll/inputs/<int:input_id>", methods=["DELETE"], endpoint="delete_payroll_input")
    @api_view
    @login_required
    def delete_payroll_input(input_id: int):
        container.payroll_input_service.delete_input(current_principal(), input_id)
        return ok(message="Payroll input deleted")

    # variable pay

    @app.route("/payroll/variable-pay", methods=["GET"], endpoint="list_variable_pay")
    @api_view
    @login_required
    def list_variable_pay():
        items = container.variable_pay_service.list_entries(
            current_principal(),
            employee_id=query_int("employee_id"),
            month=query_int("month"),
            year=query_int("year"),
            status=_enum_arg(VariablePayStatus),
        )
        return ok({"entries": items})

    @app.route("/payroll/variable-pay", methods=["POST"], endpoint="create_variable_pay")
    @api_view
    @login_required
    def create_variable_pay():
        body = parse_body(CreateVariablePayBody)
        entry = container.variable_pay_service.create_entry(current_principal(), **body.model_dump())
        return ok({"entry": entry}, message="Variable pay entry submitted", status=201)

    @app.route("/payroll/variable-pay/<int:entry_id>/approve", methods=["POST"], endpoint="approve_variable_pay")
    @api_view
    @login_required
    def approve_variable_pay(entry_id: int):
        body = parse_body(ApproveVariablePayBody)
        entry = container.variable_pay_service.decide(
            current_principal(), entry_id, status=VariablePayStatus.APPROVED, expected_version=body.version
        )
        return ok({"entry": entry}, message="Variable pay entry approved")

    @app.route("/payroll/variable-pay/<int:entry_id>/reject", methods=["POST"], endpoint="reject_variable_pay")
    @api_view
    @login_required
    def reject_variable_pay(entry_id: int):
        body = parse_body(RejectVariablePayBody)
        entry = container.variable_pay_service.decide(
            current_principal(),
            entry_id,
            status=VariablePayStatus.REJECTED,
            rejection_reason=body.rejection_reason,
            expected_version=body.version,
        )
        return ok({"entry": entry}, message="Variable pay entry rejected")

    @app.route("/payroll/variable-pay/<int:entry_id>", methods=["DELETE"], endpoint="delete_variable_pay")
    @api_view
    @login_required
    def delete_variable_pay(entry_id: int):
        container.variable_pay_service.delete_entry(current_principal(), entry_id)
        return ok(message="Variable pay entry deleted")

    # corrections

    @app.route("/payroll/corrections", methods=["GET"], endpoint="list_corrections")
    @api_view
    @login_required
    def list_corrections():
        items = container.correction_service.list_corrections(
            current_principal(), status=_enum_arg(CorrectionStatus)
        )
        return ok({"corrections": items})

    @app.route("/payroll/corrections", methods=["POST"], endpoint="create_correction")
    @api_view
    @login_required
    def create_correction():
        body = parse_body(CreateCorrectionBody)
        item = container.correction_service.create_correction(current_principal(), **body.model_dump())
        return ok({"correction": item}, message="Correction request submitted", status=201)

    @app.route("/payroll/corrections/<int:correction_id>", methods=["GET"], endpoint="get_correction")
    @api_view
    @login_required
    def get_correction(correction_id: int):
        return ok({"correction": container.correction_service.get_correction(current_principal(), correction_id)})

    @app.route("/payroll/corrections/<int:correction_id>", methods=["PUT"], endpoint="review_correction")
    @api_view
    @login_required
    def review_correction(correction_id: int):
        body = parse_body(ReviewCorrectionBody)
        item = container.correction_service.review(
            current_principal(),
            correction_id,
            status=body.status,
            review_comments=body.review_comments,
            resolution=body.resolution,
            expected_version=body.version,
        )
        return ok({"correction": item}, message="Correction request updated")

    # payslips

    @app.route("/payroll/payslips", methods=["GET"], endpoint="list_payslips")
    @api_view
    @login_required
    def list_payslips():
        items = container.payslip_service.list_payslips(
            current_principal(),
            employee_id=query_int("employee_id"),
            month=query_int("month"),
            year=query_int("year"),
        )
        return ok({"payslips": items})

    @app.route("/payroll/payslips", methods=["POST"], endpoint="generate_payslip")
    @api_view
    @login_required
    def generate_payslip():
        body = parse_body(GeneratePayslipBody)
        payslip = container.payslip_service.generate(current_principal(), payroll_id=body.payroll_id)
        return ok({"payslip": payslip}, message="Payslip generated", status=201)

    @app.route("/payroll/payslips/<int:payslip_id>/download", methods=["POST"], endpoint="download_payslip")
    @api_view
    @login_required
    def download_payslip(payslip_id: int):
        return ok({"payslip": container.payslip_service.download(current_principal(), payslip_id)})

    @app.route("/payroll/payslips/<int:payslip_id>/archive", methods=["POST"], endpoint="archive_payslip")
    @api_view
    @login_required
    def archive_payslip(payslip_id: int):
        payslip = container.payslip_service.archive(current_principal(), payslip_id)
        return ok({"payslip": payslip}, message="Payslip archived")
