"""Request helpers shared by the API blueprints."""
from flask import request
from comandas.exceptions import ValidationError


def get_json_body():
    """Parsed JSON object of the request; an empty body counts as {}."""
    data = request.get_json(silent=True)
    if data is None:
        if request.get_data(cache=True):
            raise ValidationError('El cuerpo de la petición debe ser JSON válido.')
        return {}
    if not isinstance(data, dict):
        raise ValidationError('El cuerpo de la petición debe ser un objeto JSON.')
    return data
