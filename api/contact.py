from flask import Blueprint, request, jsonify

from api.extensions import get_mailer
from models.schemas.contact import ContactSchema

bp = Blueprint("contact", __name__)

contact_schema = ContactSchema()


@bp.post("/contact")
def send_contact_message():
    """
    Send a contact form message
    ---
    tags:
      - Contact
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name, email, message]
          properties:
            name: { type: string, minLength: 2 }
            email: { type: string, format: email }
            message: { type: string, minLength: 10 }
    responses:
      201:
        description: Email sent successfully
      400:
        description: Validation error
      500:
        description: Failed to send email
    """
    data = contact_schema.load(request.get_json(silent=True) or {})
    get_mailer().send_contact_email(data["name"], data["email"], data["message"])
    return jsonify({"message": "Email sent successfully"}), 201
