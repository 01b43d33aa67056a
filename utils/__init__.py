"""Pure helpers shared by routes and services: calendar placement and colours."""
