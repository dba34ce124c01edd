"""Persistence layer for saved land deal projects.

Each project row keeps a few display columns next to two opaque JSON blobs:
``full_data`` holds the saved deal inputs and ``plotting_data`` the plot
registry of the subdivided project. The store defaults to SQLite for local
development, but accepts any SQLAlchemy-compatible URL (e.g.
PostgreSQL/MySQL) for shared deployments.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import Column, DateTime, Float, Integer, String, Text, create_engine, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from land_deal.data_models import LandIdentity

logger = logging.getLogger(__name__)

Base = declarative_base()


class ProjectStoreError(Exception):
    """A database call failed. The action was not applied."""


class ProjectNotFoundError(LookupError):
    pass


class MissingProjectDataError(Exception):
    """A project exists but its saved deal data is absent."""


class ProjectModel(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_name = Column(String(255), nullable=False)
    village_name = Column(String(255), index=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    total_land_cost = Column(Float, default=0.0, nullable=False)
    plotting_data = Column(Text, nullable=True)
    full_data = Column(Text, nullable=True)


def project_name_for(identity: LandIdentity) -> str:
    return (
        f"{identity.village or 'Project'} - TP {identity.tp_scheme or '-'}"
        f" - FP {identity.fp_number or '-'}"
    )


class ProjectStore:
    """Database-backed project store."""

    def __init__(self, url: str) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)

    def list_projects(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return all projects, newest first, optionally filtered by name or village."""
        query = select(ProjectModel).order_by(ProjectModel.created_at.desc(), ProjectModel.id.desc())
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(ProjectModel.project_name.ilike(pattern), ProjectModel.village_name.ilike(pattern))
            )
        try:
            with self._session_factory() as session:
                rows: Iterable[ProjectModel] = session.execute(query).scalars()
                return [self._to_dict(row) for row in rows]
        except SQLAlchemyError as exc:
            logger.exception("Error fetching projects")
            raise ProjectStoreError("Failed to load project history") from exc

    def get_project(self, project_id: int) -> Dict[str, Any]:
        try:
            with self._session_factory() as session:
                row = session.get(ProjectModel, project_id)
        except SQLAlchemyError as exc:
            logger.exception("Error fetching project %s", project_id)
            raise ProjectStoreError("Failed to load project") from exc
        if row is None:
            raise ProjectNotFoundError(project_id)
        return self._to_dict(row)

    def load_full_data(self, project_id: int) -> Dict[str, Any]:
        """Return the saved deal state of a project.

        Raises ``MissingProjectDataError`` when the blob is absent so the
        caller can abort the load.
        """
        project = self.get_project(project_id)
        if not project["full_data"]:
            raise MissingProjectDataError(f"Project {project_id} data is corrupted or missing")
        return project["full_data"]

    def insert_project(
        self,
        identity: LandIdentity,
        total_land_cost: float,
        full_data: Dict[str, Any],
        plotting_data: Optional[Dict[str, Any]] = None,
    ) -> int:
        if not identity.village:
            raise ValueError("Please enter a Village Name to save the project.")
        payload = ProjectModel(
            project_name=project_name_for(identity),
            village_name=identity.village,
            total_land_cost=total_land_cost,
            full_data=json.dumps(full_data),
            plotting_data=json.dumps(plotting_data) if plotting_data is not None else None,
        )
        with self._session_factory() as session:
            try:
                session.add(payload)
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("Failed to save project %s", payload.project_name)
                raise ProjectStoreError("Failed to save project") from exc
        logger.info("Saved project %s as id %s", payload.project_name, payload.id)
        return payload.id

    def update_project(
        self,
        project_id: int,
        *,
        plotting_data: Optional[Dict[str, Any]] = None,
        full_data: Optional[Dict[str, Any]] = None,
        total_land_cost: Optional[float] = None,
    ) -> None:
        """Replace the given blobs wholesale. Last write wins."""
        with self._session_factory() as session:
            try:
                row = session.get(ProjectModel, project_id)
                if row is None:
                    raise ProjectNotFoundError(project_id)
                if plotting_data is not None:
                    row.plotting_data = json.dumps(plotting_data)
                if full_data is not None:
                    row.full_data = json.dumps(full_data)
                if total_land_cost is not None:
                    row.total_land_cost = total_land_cost
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("Failed to update project %s", project_id)
                raise ProjectStoreError("Failed to save to database") from exc
        logger.info("Updated project %s", project_id)

    def delete_project(self, project_id: int) -> None:
        with self._session_factory() as session:
            try:
                row = session.get(ProjectModel, project_id)
                if row is None:
                    raise ProjectNotFoundError(project_id)
                session.delete(row)
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("Error deleting project %s", project_id)
                raise ProjectStoreError("Failed to delete project") from exc
        logger.info("Deleted project %s", project_id)

    @staticmethod
    def _to_dict(row: ProjectModel) -> Dict[str, Any]:
        return {
            "id": row.id,
            "project_name": row.project_name,
            "village_name": row.village_name,
            "created_at": row.created_at.isoformat(),
            "total_land_cost": row.total_land_cost,
            "plotting_data": json.loads(row.plotting_data) if row.plotting_data else None,
            "full_data": json.loads(row.full_data) if row.full_data else None,
        }


def create_store_from_env(url: str | None) -> ProjectStore:
    return ProjectStore(url or "sqlite:///land_deal.sqlite3")
