from __future__ import annotations

from flask import Flask

from ..common.http import api_view, current_principal, login_required, ok, parse_body, query_enum, query_int
from ..container import Container
from ..core.enums import CycleStatus, GoalCategory, GoalStatus, ReviewStatus
from .schemas import (
    CreateCycleBody,
    CreateGoalBody,
    CreateReviewBody,
    GoalProgressBody,
    UpdateCycleBody,
    UpdateGoalBody,
    UpdateReviewBody,
)


def register(app: Flask, container: Container) -> None:
    cycles = container.review_cycle_service
    goals = container.goal_service
    reviews = container.review_service

    @app.route("/performance/cycles", methods=["GET"], endpoint="list_cycles")
    @api_view
    @login_required
    def list_cycles():
        return ok({"cycles": cycles.list_cycles(current_principal(), status=query_enum("status", CycleStatus))})

    @app.route("/performance/cycles", methods=["POST"], endpoint="create_cycle")
    @api_view
    @login_required
    def create_cycle():
        body = parse_body(CreateCycleBody)
        cycle = cycles.create_cycle(current_principal(), **body.model_dump())
        return ok({"cycle": cycle}, message="Cycle created", status=201)

    @app.route("/performance/cycles/<int:cycle_id>", methods=["GET"], endpoint="get_cycle")
    @api_view
    @login_required
    def get_cycle(cycle_id: int):
        return ok({"cycle": cycles.get_cycle(current_principal(), cycle_id)})

    @app.route("/performance/cycles/<int:cycle_id>", methods=["PUT"], endpoint="update_cycle")
    @api_view
    @login_required
    def update_cycle(cycle_id: int):
        changes = parse_body(UpdateCycleBody).model_dump(exclude_unset=True)
        cycle = cycles.update_cycle(
            current_principal(), cycle_id, expected_version=changes.pop("version", None), **changes
        )
        return ok({"cycle": cycle}, message="Cycle updated")

    @app.route("/performance/cycles/<int:cycle_id>", methods=["DELETE"], endpoint="delete_cycle")
    @api_view
    @login_required
    def delete_cycle(cycle_id: int):
        cycles.delete_cycle(current_principal(), cycle_id)
        return ok(message="Cycle deleted successfully")

    @app.route("/performance/goals", methods=["GET"], endpoint="list_goals")
    @api_view
    @login_required
    def list_goals():
        found = goals.list_goals(
            current_principal(),
            status=query_enum("status", GoalStatus),
            category=query_enum("category", GoalCategory),
        )
        return ok({"goals": found})

    @app.route("/performance/goals", methods=["POST"], endpoint="create_goal")
    @api_view
    @login_required
    def create_goal():
        body = parse_body(CreateGoalBody)
        return ok({"goal": goals.create_goal(current_principal(), **body.model_dump())}, status=201)

    @app.route("/performance/goals/<int:goal_id>", methods=["GET"], endpoint="get_goal")
    @api_view
    @login_required
    def get_goal(goal_id: int):
        return ok({"goal": goals.get_goal(current_principal(), goal_id)})

    @app.route("/performance/goals/<int:goal_id>", methods=["PUT"], endpoint="update_goal")
    @api_view
    @login_required
    def update_goal(goal_id: int):
        changes = parse_body(UpdateGoalBody).model_dump(exclude_unset=True)
        goal = goals.update_goal(current_principal(), goal_id, expected_version=changes.pop("version", None), **changes)
        return ok({"goal": goal}, message="Goal updated")

    @app.route("/performance/goals/<int:goal_id>", methods=["DELETE"], endpoint="delete_goal")
    @api_view
    @login_required
    def delete_goal(goal_id: int):
        goals.delete_goal(current_principal(), goal_id)
        return ok(message="Goal deleted")

    @app.route("/performance/goals/<int:goal_id>/updates", methods=["GET"], endpoint="list_goal_updates")
    @api_view
    @login_required
    def list_goal_updates(goal_id: int):
        return ok({"updates": goals.list_updates(current_principal(), goal_id)})

    @app.route("/performance/goals/<int:goal_id>/updates", methods=["POST"], endpoint="add_goal_update")
    @api_view
    @login_required
    def add_goal_update(goal_id: int):
        body = parse_body(GoalProgressBody)
        goal = goals.add_progress(current_principal(), goal_id, update_text=body.update_text, progress=body.progress)
        return ok({"goal": goal}, message="Progress recorded", status=201)

    @app.route("/performance/reviews", methods=["GET"], endpoint="list_reviews")
    @api_view
    @login_required
    def list_reviews():
        found = reviews.list_reviews(
            current_principal(),
            employee_id=query_int("employee_id"),
            cycle_id=query_int("cycle_id"),
            status=query_enum("status", ReviewStatus),
        )
        return ok({"reviews": found})

    @app.route("/performance/reviews", methods=["POST"], endpoint="create_review")
    @api_view
    @login_required
    def create_review():
        body = parse_body(CreateReviewBody)
        return ok({"review": reviews.create_review(current_principal(), **body.model_dump())}, status=201)

    @app.route("/performance/reviews/<int:review_id>", methods=["GET"], endpoint="get_review")
    @api_view
    @login_required
    def get_review(review_id: int):
        return ok({"review": reviews.get_review(current_principal(), review_id)})

    @app.route("/performance/reviews/<int:review_id>", methods=["PUT"], endpoint="update_review")
    @api_view
    @login_required
    def update_review(review_id: int):
        changes = parse_body(UpdateReviewBody).model_dump(exclude_unset=True)
        review = reviews.update_review(
            current_principal(), review_id, expected_version=changes.pop("version", None), **changes
        )
        return ok({"review": review}, message="Review updated")

    @app.route("/performance/reviews/<int:review_id>", methods=["DELETE"], endpoint="delete_review")
    @api_view
    @login_required
    def delete_review(review_id: int):
        reviews.delete_review(current_principal(), review_id)
        return ok(message="Review deleted")
