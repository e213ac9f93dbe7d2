"""
QuillMind Backend — API Contract Schemas
==========================================

What:  Pydantic request/response models shared by the server routes and
       the Python client in quillmind.client.
Why:   One definition of every body on the wire, including the error
       envelope, so both sides parse the same shape.
"""
