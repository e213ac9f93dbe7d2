# Services package init
"""
QuillMind Backend — Services Layer
====================================

Service Inventory:
    - TokenService:        issue / verify signed session tokens
    - AuthService:         registration and login
    - OwnershipResolver:   Permitted / NotFound / Forbidden decisions
    - ProjectService:      project CRUD (delete cascades to files)
    - FileService:         file CRUD behind the ownership gate
    - LLMService (abstract) and GeminiService: generative text provider
    - TextActionService:   maps action verbs onto prompts

Routes call these singletons; tests construct them with injected doubles.
"""
