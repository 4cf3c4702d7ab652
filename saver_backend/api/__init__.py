"""
The `api` package exposes the HTTP surface of the application.

Contents
--------
- fast_api: the public/member router (auth, cases, completion, upload, e-mail, support)
- admin_api: the admin back-office router
- dependencies: request-scoped wiring (session resolution, gated store, admin guard)
- models: Pydantic request bodies
- utils: JWT issue/verify helpers
- prompt_utilities: LLM completion client and image payload helpers
- change_feed: in-process fan-out for the support realtime channels
- aws_bucket_funcs: S3 upload helpers
- mail_funcs: transactional e-mail
"""
