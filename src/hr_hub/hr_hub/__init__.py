"""HR Hub package.

Feature modules (attendance, timesheets, regularizations, projects, users, reports)
each follow the same layering: model -> repository protocol -> MySQL repository ->
service -> Flask controller.
"""
