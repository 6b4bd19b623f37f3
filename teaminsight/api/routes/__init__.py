"""Route modules - one APIRouter per resource, registered in main.py."""
