"""
GraphQL documents for the Railway public API (backboard v2).
"""

ENVIRONMENTS_QUERY = """
query environments($projectId: String!) {
  environments(projectId: $projectId) {
    edges {
      node {
        id
        name
        deployments {
          edges {
            node {
              id
              status
            }
          }
        }
        deploymentTriggers {
          edges {
            node {
              id
              environmentId
              branch
              projectId
            }
          }
        }
        serviceInstances {
          edges {
            node {
              id
              serviceId
              startCommand
              domains {
                serviceDomains {
                  domain
                }
              }
            }
          }
        }
      }
    }
  }
}
"""

SERVICE_QUERY = """
query service($id: String!) {
  service(id: $id) {
    id
    name
  }
}
"""

PROJECT_TOKENS_QUERY = """
query projectTokens($projectId: String!) {
  projectTokens(projectId: $projectId) {
    edges {
      node {
        id
        name
        environmentId
        displayToken
      }
    }
  }
}
"""

ENVIRONMENT_CREATE_MUTATION = """
mutation environmentCreate($input: EnvironmentCreateInput!) {
  environmentCreate(input: $input) {
    id
    name
    createdAt
    deploymentTriggers {
      edges {
        node {
          id
          environmentId
          branch
          projectId
        }
      }
    }
    serviceInstances {
      edges {
        node {
          id
          serviceId
          startCommand
          domains {
            serviceDomains {
              domain
            }
          }
        }
      }
    }
  }
}
"""

VARIABLE_COLLECTION_UPSERT_MUTATION = """
mutation variableCollectionUpsert($input: VariableCollectionUpsertInput!) {
  variableCollectionUpsert(input: $input)
}
"""

DEPLOYMENT_TRIGGER_UPDATE_MUTATION = """
mutation deploymentTriggerUpdate($id: String!, $input: DeploymentTriggerUpdateInput!) {
  deploymentTriggerUpdate(id: $id, input: $input) {
    id
  }
}
"""

SERVICE_INSTANCE_REDEPLOY_MUTATION = """
mutation serviceInstanceRedeploy($environmentId: String!, $serviceId: String!) {
  serviceInstanceRedeploy(environmentId: $environmentId, serviceId: $serviceId)
}
"""

PROJECT_TOKEN_CREATE_MUTATION = """
mutation projectTokenCreate($input: ProjectTokenCreateInput!) {
  projectTokenCreate(input: $input)
}
"""

PROJECT_TOKEN_DELETE_MUTATION = """
mutation projectTokenDelete($id: String!) {
  projectTokenDelete(id: $id)
}
"""

OPERATIONS = {
    "environments": ENVIRONMENTS_QUERY,
    "service": SERVICE_QUERY,
    "projectTokens": PROJECT_TOKENS_QUERY,
    "environmentCreate": ENVIRONMENT_CREATE_MUTATION,
    "variableCollectionUpsert": VARIABLE_COLLECTION_UPSERT_MUTATION,
    "deploymentTriggerUpdate": DEPLOYMENT_TRIGGER_UPDATE_MUTATION,
    "serviceInstanceRedeploy": SERVICE_INSTANCE_REDEPLOY_MUTATION,
    "projectTokenCreate": PROJECT_TOKEN_CREATE_MUTATION,
    "projectTokenDelete": PROJECT_TOKEN_DELETE_MUTATION,
}
