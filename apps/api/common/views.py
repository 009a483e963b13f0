"""
Shared API views
"""
from django.http import JsonResponse
from django.db import connection


def health_check(request):
    """
    Health check endpoint

    Returns:
        - 200: everything is fine
        - 503: database connection failed
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")

        return JsonResponse({
            "status": "healthy",
            "service": "questpoints-api",
            "database": "connected",
        }, status=200)
    except Exception as e:
        return JsonResponse({
            "status": "unhealthy",
            "service": "questpoints-api",
            "database": "disconnected",
            "error": str(e),
        }, status=503)
