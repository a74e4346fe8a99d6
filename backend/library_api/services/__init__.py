# Business logic services, one stateless module-level instance each.
