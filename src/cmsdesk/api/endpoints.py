"""Fixed API paths, relative to the configured base URL."""

from __future__ import annotations


class ApiEndpoints:
    LOGIN = "/auth/login"
    REGISTER = "/auth/register"

    USERS = "/users"

    CONTENT = "/content"
    MY_CONTENT_HISTORY = "/content/history/my"

    CATEGORIES = "/categories"
    PUBLIC_CATEGORIES = "/categories/public"
    SUBCATEGORIES = "/subcategories"

    PROJECTS = "/projects"
    PROJECT_STATUSES = "/project-statuses"
    PUBLIC_PROJECT_STATUSES = "/project-statuses/public"
    PROJECT_AREAS = "/project-areas"
    PUBLIC_PROJECT_AREAS = "/project-areas/public"

    @staticmethod
    def user(user_id: int) -> str:
        return f"/users/{user_id}"

    @staticmethod
    def content(content_id: int) -> str:
        return f"/content/{content_id}"

    @staticmethod
    def content_history(content_id: int) -> str:
        return f"/content/{content_id}/history"

    @staticmethod
    def user_content_history(user_id: int) -> str:
        return f"/content/history/user/{user_id}"

    @staticmethod
    def category(category_id: int) -> str:
        return f"/categories/{category_id}"

    @staticmethod
    def subcategory(subcategory_id: int) -> str:
        return f"/subcategories/{subcategory_id}"

    @staticmethod
    def project(project_id: int) -> str:
        return f"/projects/{project_id}"

    @staticmethod
    def project_history(project_id: int) -> str:
        return f"/projects/{project_id}/history"
