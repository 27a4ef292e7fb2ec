# taskhub/services/analytics.py
"""
Aggregations behind the director, HR and team workload dashboards.

The functions take plain lists of ORM rows so the routers decide what to
load; everything here is grouping and counting.
"""

import math
from collections import OrderedDict
from decimal import Decimal, ROUND_HALF_UP
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from taskhub.config import settings
from taskhub.models import Project, ProjectStatus, Task, TaskStatus, User

WORKLOAD_OVERLOADED = "overloaded"
WORKLOAD_OPTIMAL = "optimal"
WORKLOAD_MODERATE = "moderate"
WORKLOAD_UNDERUTILIZED = "underutilized"


def round_half_up(value: float, digits: int = 0):
    """Round halves up, so 12.5 gives 13 and 0.25 gives 0.3 at one digit"""
    rounded = Decimal(str(value)).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)
    return int(rounded) if digits == 0 else float(rounded)


def percentage(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole else 0


def is_active(task: Task) -> bool:
    return task.status != TaskStatus.COMPLETED.value


def is_overdue(task: Task, today: Optional[date] = None) -> bool:
    today = today or date.today()
    return is_active(task) and task.due_date is not None and task.due_date < today


def is_due_soon(task: Task, today: Optional[date] = None) -> bool:
    today = today or date.today()
    if not is_active(task) or task.due_date is None:
        return False
    return today <= task.due_date <= today + timedelta(days=settings.DUE_SOON_DAYS)


def is_high_priority(task: Task) -> bool:
    return task.priority is not None and task.priority >= settings.HIGH_PRIORITY_THRESHOLD


def workload_level(active_tasks: int) -> str:
    if active_tasks >= 8:
        return WORKLOAD_OVERLOADED
    if active_tasks >= 5:
        return WORKLOAD_OPTIMAL
    if active_tasks >= 2:
        return WORKLOAD_MODERATE
    return WORKLOAD_UNDERUTILIZED


def productivity_score(task_rate: int, project_rate: int, tasks_per_employee: float) -> int:
    return round_half_up(task_rate * 0.4 + project_rate * 0.3 + min(tasks_per_employee * 10, 30) * 0.3)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _tasks_by_owner(tasks: Iterable[Task]) -> Dict[str, List[Task]]:
    grouped: Dict[str, List[Task]] = {}
    for task in tasks:
        grouped.setdefault(str(task.owner_id), []).append(task)
    return grouped


def _users_with_department(users: Iterable[User]) -> List[User]:
    return [u for u in users if u.department]


# Director


def company_kpis(users: List[User], tasks: List[Task], projects: List[Project],
                 now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    today = now.date()
    since = now - timedelta(days=30)

    employees = _users_with_department(users)
    completed_tasks = sum(1 for t in tasks if not is_active(t))
    active_tasks = len(tasks) - completed_tasks
    overdue_tasks = sum(1 for t in tasks if is_overdue(t, today))
    recent = sum(1 for t in tasks if t.created_at and _as_utc(t.created_at) >= since)

    active_projects = sum(1 for p in projects if p.status == ProjectStatus.ACTIVE)
    completed_projects = sum(1 for p in projects if p.status == ProjectStatus.COMPLETED)
    on_hold_projects = sum(1 for p in projects if p.status == ProjectStatus.ON_HOLD)

    return {
        "companyKPIs": {
            "totalEmployees": len(employees),
            "totalProjects": len(projects),
            "totalTasks": len(tasks),
            "systemActivity": recent,
        },
        "projectPortfolio": {
            "total": len(projects),
            "active": active_projects,
            "completed": completed_projects,
            "onHold": on_hold_projects,
            "completionRate": percentage(completed_projects, len(projects)),
        },
        "taskMetrics": {
            "total": len(tasks),
            "active": active_tasks,
            "completed": completed_tasks,
            "overdue": overdue_tasks,
            "completionRate": percentage(completed_tasks, len(tasks)),
        },
    }


def department_performance(users: List[User], tasks: List[Task], projects: List[Project]) -> List[Dict[str, Any]]:
    groups: Dict[str, List[User]] = OrderedDict()
    for user in _users_with_department(users):
        groups.setdefault(user.department, []).append(user)

    departments = []
    for name, members in groups.items():
        emp_ids = {str(u.emp_id) for u in members}
        dept_tasks = [t for t in tasks if str(t.owner_id) in emp_ids]
        dept_projects = [p for p in projects if str(p.owner_id) in emp_ids]
        completed_tasks = sum(1 for t in dept_tasks if not is_active(t))
        completed_projects = sum(1 for p in dept_projects if p.status == ProjectStatus.COMPLETED)

        task_rate = percentage(completed_tasks, len(dept_tasks))
        project_rate = percentage(completed_projects, len(dept_projects))
        tasks_per_employee = round_half_up(len(dept_tasks) / len(members), 1) if members else 0.0

        departments.append({
            "name": name,
            "employeeCount": len(members),
            "taskCompletionRate": task_rate,
            "projectCompletionRate": project_rate,
            "tasksPerEmployee": tasks_per_employee,
            "productivityScore": productivity_score(task_rate, project_rate, tasks_per_employee),
            "totalTasks": len(dept_tasks),
            "totalProjects": len(dept_projects),
        })
    return departments


def resource_allocation(users: List[User], tasks: List[Task], today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    owned = _tasks_by_owner(tasks)

    employees = []
    for user in _users_with_department(users):
        user_tasks = owned.get(str(user.emp_id), [])
        active = [t for t in user_tasks if is_active(t)]
        level = workload_level(len(active))
        employees.append({
            "emp_id": user.emp_id,
            "name": user.name,
            "department": user.department,
            "role": user.role,
            "totalTasks": len(user_tasks),
            "activeTasks": len(active),
            "overdueTasks": sum(1 for t in user_tasks if is_overdue(t, today)),
            "highPriorityTasks": sum(1 for t in active if is_high_priority(t)),
            "workloadLevel": level,
            "workloadScore": len(active),
        })

    departments: Dict[str, Dict[str, Any]] = OrderedDict()
    for emp in employees:
        stats = departments.setdefault(emp["department"], {
            "name": emp["department"],
            "totalEmployees": 0,
            "totalActiveTasks": 0,
            "averageWorkload": 0,
            "overloadedEmployees": 0,
            "underutilizedEmployees": 0,
        })
        stats["totalEmployees"] += 1
        stats["totalActiveTasks"] += emp["activeTasks"]
        if emp["workloadLevel"] == WORKLOAD_OVERLOADED:
            stats["overloadedEmployees"] += 1
        if emp["workloadLevel"] == WORKLOAD_UNDERUTILIZED:
            stats["underutilizedEmployees"] += 1
    for stats in departments.values():
        stats["averageWorkload"] = round_half_up(stats["totalActiveTasks"] / stats["totalEmployees"], 1)

    return {
        "employeeWorkloads": sorted(employees, key=lambda e: e["workloadScore"], reverse=True),
        "departmentWorkloads": list(departments.values()),
        "summary": {
            "totalEmployees": len(employees),
            "overloadedCount": sum(1 for e in employees if e["workloadLevel"] == WORKLOAD_OVERLOADED),
            "underutilizedCount": sum(1 for e in employees if e["workloadLevel"] == WORKLOAD_UNDERUTILIZED),
            "optimalCount": sum(1 for e in employees if e["workloadLevel"] == WORKLOAD_OPTIMAL),
        },
    }


def _risk_level(count: int, high: int, medium: int) -> str:
    if count > high:
        return "high"
    if count > medium:
        return "medium"
    return "low"


def _count_by_department(tasks: Iterable[Task], departments: Dict[str, str]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for task in tasks:
        dept = departments.get(str(task.owner_id)) or "Unknown"
        counts[dept] = counts.get(dept, 0) + 1
    return counts


def risk_indicators(users: List[User], tasks: List[Task], projects: List[Project],
                    now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    today = now.date()
    cutoff = now - timedelta(days=settings.STAGNANT_PROJECT_DAYS)
    departments = {str(u.emp_id): u.department for u in users}

    stagnant = []
    for project in projects:
        last_update = _as_utc(project.updated_at or project.created_at)
        if project.status != ProjectStatus.COMPLETED and last_update and last_update < cutoff:
            stagnant.append(project)
    stagnant.sort(key=lambda p: _as_utc(p.updated_at or p.created_at))

    overdue = [t for t in tasks if is_overdue(t, today)]
    backlog = [t for t in tasks if is_active(t) and is_high_priority(t)]

    return {
        "stagnantProjects": {
            "count": len(stagnant),
            "items": [
                {
                    "id": p.id,
                    "title": p.title,
                    "status": p.status,
                    "updated_at": p.updated_at.isoformat() if p.updated_at else None,
                    "created_at": p.created_at.isoformat() if p.created_at else None,
                }
                for p in stagnant[:10]
            ],
            "riskLevel": _risk_level(len(stagnant), 5, 2),
        },
        "overdueTasks": {
            "count": len(overdue),
            "highPriorityOverdue": sum(1 for t in overdue if is_high_priority(t)),
            "byDepartment": _count_by_department(overdue, departments),
            "riskLevel": _risk_level(len(overdue), 20, 10),
        },
        "highPriorityBacklog": {
            "count": len(backlog),
            "ongoing": sum(1 for t in backlog if t.status == TaskStatus.ONGOING.value),
            "underReview": sum(1 for t in backlog if t.status == TaskStatus.UNDER_REVIEW.value),
            "byDepartment": _count_by_department(backlog, departments),
            "riskLevel": _risk_level(len(backlog), 15, 8),
        },
    }


def collaboration_metrics(users: List[User], projects: List[Project]) -> Dict[str, Any]:
    departments = {str(u.emp_id): u.department for u in users if u.department}

    cross = []
    for project in projects:
        members = project.members or []
        if len(members) <= 1:
            continue
        project_departments = list(OrderedDict.fromkeys(
            departments[str(m)] for m in members if str(m) in departments
        ))
        if len(project_departments) > 1:
            cross.append({
                "id": project.id,
                "title": project.title,
                "owner_id": project.owner_id,
                "members": members,
                "status": project.status,
                "departmentCount": len(project_departments),
                "departments": project_departments,
            })

    average = 0
    if cross:
        average = round_half_up(sum(p["departmentCount"] for p in cross) / len(cross), 1)

    return {
        "crossDepartmentalProjects": cross,
        "collaborationMetrics": {
            "totalProjects": len(projects),
            "crossDeptProjects": len(cross),
            "collaborationRate": percentage(len(cross), len(projects)),
            "averageDepartmentsPerProject": average,
        },
    }


# HR


def employee_task_counts(users: List[User], tasks: List[Task]) -> List[Dict[str, Any]]:
    owned = _tasks_by_owner(tasks)
    rows = []
    for user in users:
        user_tasks = owned.get(str(user.emp_id), [])
        rows.append({
            "id": user.id,
            "emp_id": user.emp_id,
            "name": user.name,
            "email": user.email,
            "department": user.department,
            "role": user.role,
            "created_at": user.created_at.isoformat() if user.created_at else None,
            "tasks_assigned": len(user_tasks),
            "tasks_completed": sum(1 for t in user_tasks if not is_active(t)),
        })
    return rows


def hr_insights(users: List[User], tasks: List[Task], projects: List[Project],
                today: Optional[date] = None) -> Dict[str, Any]:
    employees = _users_with_department(users)
    breakdown: Dict[str, int] = OrderedDict()
    for user in employees:
        breakdown[user.department] = breakdown.get(user.department, 0) + 1

    completed = sum(1 for t in tasks if not is_active(t))
    return {
        "totalEmployees": len(employees),
        "departmentBreakdown": breakdown,
        "totalTasks": len(tasks),
        "overdueTasks": sum(1 for t in tasks if is_overdue(t, today)),
        "taskCompletionRate": percentage(completed, len(tasks)),
        "totalProjects": len(projects),
        "activeProjects": sum(1 for p in projects if p.status == ProjectStatus.ACTIVE),
    }


def employee_performance(users: List[User], tasks: List[Task], today: Optional[date] = None) -> List[Dict[str, Any]]:
    owned = _tasks_by_owner(tasks)
    rows = []
    for user in users:
        user_tasks = owned.get(str(user.emp_id), [])
        completed = sum(1 for t in user_tasks if not is_active(t))
        rows.append({
            "emp_id": user.emp_id,
            "name": user.name,
            "department": user.department,
            "role": user.role,
            "totalTasks": len(user_tasks),
            "completedTasks": completed,
            "overdueTasks": sum(1 for t in user_tasks if is_overdue(t, today)),
            "completionRate": percentage(completed, len(user_tasks)),
        })
    return rows


def department_loads(users: List[User], tasks: List[Task], today: Optional[date] = None) -> List[Dict[str, Any]]:
    owned = _tasks_by_owner(tasks)
    stats: Dict[str, Dict[str, Any]] = OrderedDict()
    for user in _users_with_department(users):
        dept = stats.setdefault(user.department, {"name": user.department, "members": 0, "active": 0, "overdue": 0})
        dept["members"] += 1
        for task in owned.get(str(user.emp_id), []):
            if is_active(task):
                dept["active"] += 1
            if is_overdue(task, today):
                dept["overdue"] += 1
    return list(stats.values())


def performance_rankings(users: List[User], tasks: List[Task], today: Optional[date] = None) -> List[Dict[str, Any]]:
    owned = _tasks_by_owner(tasks)
    rankings = []
    for user in users:
        user_tasks = owned.get(str(user.emp_id), [])
        total = len(user_tasks)
        completed = sum(1 for t in user_tasks if not is_active(t))
        overdue = sum(1 for t in user_tasks if is_overdue(t, today))
        rankings.append({
            "id": user.id,
            "emp_id": user.emp_id,
            "name": user.name,
            "department": user.department,
            "totalTasks": total,
            "completedTasks": completed,
            "overdueRate": overdue / total * 100 if total else 0,
            "performanceScore": (completed - overdue) / total * 100 if total else 0,
        })
    rankings.sort(key=lambda r: r["performanceScore"], reverse=True)
    return rankings


def period_key(created: datetime, period: str) -> str:
    if period == "weekly":
        return f"{created.year}-{created.month:02d}-W{math.ceil(created.day / 7)}"
    return f"{created.year}-{created.month:02d}"


def productivity_trends(tasks: List[Task], period: str = "monthly") -> List[Dict[str, Any]]:
    grouped: Dict[str, Dict[str, Any]] = OrderedDict()
    for task in sorted((t for t in tasks if t.created_at), key=lambda t: _as_utc(t.created_at)):
        key = period_key(task.created_at, period)
        bucket = grouped.setdefault(key, {"period": key, "total": 0, "completed": 0})
        bucket["total"] += 1
        if not is_active(task):
            bucket["completed"] += 1
    return list(grouped.values())


# Team workload


def team_workload(members: List[User], tasks: List[Task], today: Optional[date] = None) -> Dict[str, Any]:
    """
    Per-member owned/collaboration task lists with due-soon, overdue and
    status counters. A task counts once per member even when the member both
    owns it and collaborates on it.
    """
    today = today or date.today()
    workload: Dict[str, Dict[str, Any]] = OrderedDict()
    for member in members:
        workload[str(member.emp_id)] = {
            "member_info": {
                "emp_id": member.emp_id,
                "name": member.name,
                "email": member.email,
                "department": member.department,
                "role": member.role,
            },
            "owned_tasks": [],
            "collaboration_tasks": [],
            "total_tasks": 0,
            "due_soon_count": 0,
            "overdue_count": 0,
            "task_status_breakdown": {status.value: 0 for status in
                                      (TaskStatus.UNDER_REVIEW, TaskStatus.ONGOING, TaskStatus.COMPLETED)},
        }

    for task in tasks:
        collaborators = [str(c) for c in (task.collaborators or [])]
        for emp_id, entry in workload.items():
            is_owner = str(task.owner_id) == emp_id
            if not is_owner and emp_id not in collaborators:
                continue

            due_soon = is_due_soon(task, today)
            overdue = is_overdue(task, today)
            summary = {
                "id": task.id,
                "title": task.title,
                "status": task.status,
                "priority": task.priority,
                "due_date": task.due_date.isoformat() if task.due_date else None,
                "owner_id": task.owner_id,
                "project_id": task.project_id,
                "due_soon": due_soon,
                "overdue": overdue,
            }
            entry["owned_tasks" if is_owner else "collaboration_tasks"].append(summary)

            entry["total_tasks"] += 1
            if due_soon:
                entry["due_soon_count"] += 1
            if overdue:
                entry["overdue_count"] += 1
            if task.status in entry["task_status_breakdown"]:
                entry["task_status_breakdown"][task.status] += 1

    return {
        "workload": workload,
        "summary": {
            "total_members": len(members),
            "total_tasks": sum(e["total_tasks"] for e in workload.values()),
            "due_soon": sum(e["due_soon_count"] for e in workload.values()),
            "overdue": sum(e["overdue_count"] for e in workload.values()),
        },
    }
