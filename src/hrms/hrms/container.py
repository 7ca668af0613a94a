from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_POOL_SIZE
from .database.connection import DBConfig, DatabaseConnection
from .departments.mysql_department_repository import MySQLDepartmentRepository, MySQLPositionRepository
from .departments.service import DepartmentService, PositionService
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.service import EmployeeService
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.service import LeaveService
from .payroll.calculator.hour_variance import HourVarianceCalculator
from .payroll.composer import PayrollEntryComposer
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.service import PayrollService
from .reports.mysql_report_repository import MySQLReportRepository
from .reports.service import ReportService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    departments_repo: MySQLDepartmentRepository
    positions_repo: MySQLPositionRepository
    attendance_repo: MySQLAttendanceRepository
    leave_repo: MySQLLeaveRepository
    users_repo: MySQLUserRepository
    payroll_repo: MySQLPayrollRepository
    reports_repo: MySQLReportRepository

    employee_service: EmployeeService
    department_service: DepartmentService
    position_service: PositionService
    attendance_service: AttendanceService
    leave_service: LeaveService
    auth_service: AuthService
    user_service: UserService
    payroll_service: PayrollService
    report_service: ReportService


def build_container(*, db_config: dict) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        pool_size=int(db_config.get("pool_size", DEFAULT_POOL_SIZE)),
    )
    conn = DatabaseConnection.get_instance(config)

    employees_repo = MySQLEmployeeRepository(conn)
    departments_repo = MySQLDepartmentRepository(conn)
    positions_repo = MySQLPositionRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    leave_repo = MySQLLeaveRepository(conn)
    users_repo = MySQLUserRepository(conn)
    payroll_repo = MySQLPayrollRepository(conn)
    reports_repo = MySQLReportRepository(conn)

    composer = PayrollEntryComposer(HourVarianceCalculator(attendance_repo))

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        departments_repo=departments_repo,
        positions_repo=positions_repo,
        attendance_repo=attendance_repo,
        leave_repo=leave_repo,
        users_repo=users_repo,
        payroll_repo=payroll_repo,
        reports_repo=reports_repo,
        employee_service=EmployeeService(employees_repo),
        department_service=DepartmentService(departments_repo),
        position_service=PositionService(positions_repo),
        attendance_service=AttendanceService(attendance_repo),
        leave_service=LeaveService(leave_repo),
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        payroll_service=PayrollService(payroll_repo, composer),
        report_service=ReportService(reports_repo, attendance_repo),
    )
