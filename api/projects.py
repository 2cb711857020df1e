from __future__ import annotations

from typing import List

from flask import Blueprint, request, jsonify, abort

from api.extensions import get_storage
from models.project import Project, ProjectCategory
from models.schemas.project import ProjectCreateSchema, ProjectUpdateSchema, ProjectOutSchema
from utils.decorators import roles_required

bp = Blueprint("projects", __name__)

# Schemas
project_create_schema = ProjectCreateSchema()
project_update_schema = ProjectUpdateSchema()
project_out_schema = ProjectOutSchema()
projects_out_schema = ProjectOutSchema(many=True)

# Sorting allowlist: API field -> SQLAlchemy column
SORT_COLUMNS = {
    "importance": Project.importance,
    "created_at": Project.created_at,
}


def parse_sort() -> List:
    key = request.args.get("sort", "importance")
    order = request.args.get("order", "desc").lower()
    col = SORT_COLUMNS.get(key)
    if col is None:
        abort(400, description=f"Unsupported sort field: {key}. Allowed: importance, created_at")
    if order not in ("asc", "desc"):
        abort(400, description="order must be 'asc' or 'desc'")
    primary = col.desc() if order == "desc" else col.asc()
    # stable tiebreak so pages do not shuffle
    return [primary, Project.id.asc()]


def parse_bool(name: str):
    val = request.args.get(name)
    if val is None:
        return None
    lowered = val.lower()
    if lowered in ("1", "true", "yes"):
        return True
    if lowered in ("0", "false", "no"):
        return False
    abort(400, description=f"{name} must be a boolean")


def apply_filters(query):
    category = request.args.get("category")
    featured = parse_bool("featured")

    if category:
        try:
            query = query.filter(Project.category == ProjectCategory(category))
        except ValueError:
            abort(400, description=f"Unsupported category: {category}")

    if featured is not None:
        query = query.filter(Project.featured == featured)

    return query


def get_project_or_404(project_id: str) -> Project:
    p = get_storage().get(Project, project_id)
    if not p:
        abort(404, description=f"Project with ID {project_id} not found")
    return p


@bp.post("/projects")
@roles_required(["ADMIN"])
def create_project():
    """
    Create a new project
    ---
    tags:
      - Projects
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [title, description, technologies, image_url, featured, importance]
          properties:
            title: { type: string, maxLength: 255 }
            description: { type: string }
            technologies:
              type: array
              items: { type: string }
            image_url: { type: string, format: uri }
            live_url: { type: string, format: uri }
            github_url: { type: string, format: uri }
            featured: { type: boolean }
            importance: { type: integer }
            category:
              type: string
              enum: [DEFAULT, FULL_STACK, FRONT_END, BACK_END, MOBILE, GAME]
              default: DEFAULT
    responses:
      201:
        description: Created
      400:
        description: Validation error
      401:
        description: Unauthorized
      403:
        description: Admin role required
    """
    storage = get_storage()
    data = project_create_schema.load(request.get_json(silent=True) or {})

    p = Project(
        title=data["title"],
        description=data["description"],
        technologies=data["technologies"],
        image_url=data["image_url"],
        live_url=data.get("live_url"),
        github_url=data.get("github_url"),
        featured=data["featured"],
        importance=data["importance"],
        category=ProjectCategory(data["category"]),
    )
    storage.new(p)
    storage.save()

    return jsonify({"data": project_out_schema.dump(p)}), 201


@bp.get("/projects")
def list_projects():
    """
    List every project matching the filters, sorted
    ---
    tags:
      - Projects
    parameters:
      - in: query
        name: category
        type: string
        enum: [DEFAULT, FULL_STACK, FRONT_END, BACK_END, MOBILE, GAME]
      - in: query
        name: featured
        type: boolean
      - in: query
        name: sort
        type: string
        enum: [importance, created_at]
        default: importance
      - in: query
        name: order
        type: string
        enum: [asc, desc]
        default: desc
    responses:
      200:
        description: List of projects
      400:
        description: Bad filter or sort value
    """
    session = get_storage().get_session()
    order_by = parse_sort()

    query = apply_filters(session.query(Project))
    rows = query.order_by(*order_by).all()

    return jsonify(
        {
            "data": projects_out_schema.dump(rows),
            "meta": {
                "total": len(rows),
                "sort": request.args.get("sort", "importance"),
                "order": request.args.get("order", "desc"),
            },
        }
    )


@bp.get("/projects/<project_id>")
def get_project(project_id: str):
    """
    Get a single project by id
    ---
    tags:
      - Projects
    parameters:
      - in: path
        name: project_id
        type: string
        required: true
    responses:
      200:
        description: Project found
      404:
        description: Not found
    """
    return jsonify({"data": project_out_schema.dump(get_project_or_404(project_id))})


@bp.patch("/projects/<project_id>")
@roles_required(["ADMIN"])
def update_project(project_id: str):
    """
    Update a project (partial)
    ---
    tags:
      - Projects
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: project_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
    responses:
      200:
        description: Updated
      400:
        description: Validation error
      404:
        description: Not found
    """
    storage = get_storage()
    p = get_project_or_404(project_id)
    data = project_update_schema.load(request.get_json(silent=True) or {})

    if "category" in data:
        data["category"] = ProjectCategory(data["category"])
    for key, value in data.items():
        setattr(p, key, value)

    storage.new(p)
    storage.save()
    return jsonify({"data": project_out_schema.dump(p)}), 200


@bp.delete("/projects/<project_id>")
@roles_required(["ADMIN"])
def delete_project(project_id: str):
    """
    Delete a project; returns the deleted record
    ---
    tags:
      - Projects
    security:
      - Bearer: []
    parameters:
      - in: path
        name: project_id
        type: string
        required: true
    responses:
      200:
        description: Deleted
      404:
        description: Not found
    """
    storage = get_storage()
    p = get_project_or_404(project_id)
    body = project_out_schema.dump(p)
    storage.delete(p)
    storage.save()
    return jsonify({"data": body}), 200
