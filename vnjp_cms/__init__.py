"""Bilingual (Vietnamese / Japanese) corporate CMS - Backend.

The public site and the admin panel are a separate React SPA; this package is
the REST API behind both:

- Content types: news, agriculture articles, tags, personnel, partners,
  cooperatives, customer feedback, contacts.
- Parent documents (news, agriculture) hold ordered `{id}` references to their
  child item documents, one list per language.
- JWT access/refresh tokens; refresh tokens live in Redis keyed by user id.
- Uploaded media is stored on local disk under `uploads/<folder>/`.

See README for setup and usage.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
