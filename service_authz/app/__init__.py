"""
Handler package for the authorization request-handling layer.

- app.api: Decision service client and wire models.
- app.web: Credential parsing, certificate extraction and the action to
  response tables.
- app.spi: Capability interfaces a deployment implements.
- app.handlers: One request handler per endpoint kind.
- app.endpoints: Base endpoints turning a Starlette request into an
  envelope and routing fatal errors to the error hook.

Design notes:
- Handlers are stateless; create one per request or share one freely.
- Module import must not perform network calls.
- Use the shared/ utilities for logging, metrics and errors.
"""
