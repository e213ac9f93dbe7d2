# Routes package init
"""
QuillMind Backend — API Routes Package
========================================

Route Inventory:
    - auth.py:      POST   /api/auth/register, /api/auth/login
    - projects.py:  POST   /api/projects
                    GET    /api/projects
                    DELETE /api/projects/{project_id}
                    POST   /api/projects/{project_id}/files
                    GET    /api/projects/{project_id}/files
    - files.py:     GET    /api/files/{file_id}
                    PUT    /api/files/{file_id}
                    DELETE /api/files/{file_id}
    - ai.py:        POST   /api/ai/action
    - health.py:    GET    /health
    - deps.py:      bearer-token dependency shared by the /api routes above

Routes stay thin: extract the request data, call a service, shape the
response. Ownership and validation live in the services.
"""
