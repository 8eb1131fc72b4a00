from rdflib import Namespace


LDP = Namespace("http://www.w3.org/ns/ldp#")
SOLID = Namespace("http://www.w3.org/ns/solid/terms#")
ACP = Namespace("http://www.w3.org/ns/solid/acp#")

TURTLE_MEDIA_TYPE = "text/turtle"
SPARQL_UPDATE_MEDIA_TYPE = "application/sparql-update"

# Exact body Node Solid Server returns for a plain container PUT.
# See https://github.com/solid/node-solid-server/issues/1465
NSS_CREATE_CONTAINER_ERROR = "Can't write file: PUT not supported on containers, use POST instead"
