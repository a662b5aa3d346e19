"""
Helpers genéricos de serialización.
NO contiene lógica de negocio, solo utilidades de formato.
"""
def serialize_datetime(value):
    """Convierte datetime a string ISO; los naive se guardan en UTC y llevan sufijo Z"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.isoformat() + "Z"
    return value.isoformat()


def serialize_queue(queue):
    """Ticket con resumen de su counter, como lo devuelven search y list"""
    counter = queue.counter
    return {
        "id": queue.id,
        "queueNumber": queue.number,
        "status": queue.status,
        "counter": {"id": counter.id, "name": counter.name} if counter else None,
        "createdAt": serialize_datetime(queue.created_at),
        "updatedAt": serialize_datetime(queue.updated_at),
    }


def envelope(message, data=None, status=True):
    return {"status": status, "message": message, "data": data}
