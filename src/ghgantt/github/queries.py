"""GraphQL query templates for the GitHub Projects and Issues APIs."""

# Shared body of the project query (fields + one page of items)
_PROJECT_BODY = """
    projectV2(number: $number) {
      id
      title
      fields(first: 50) {
        nodes {
          ... on ProjectV2SingleSelectField {
            id
            name
            options {
              id
              name
            }
          }
          ... on ProjectV2Field {
            id
            name
          }
          ... on ProjectV2IterationField {
            id
            name
          }
        }
      }
      items(first: 100, after: $cursor) {
        pageInfo {
          hasNextPage
          endCursor
        }
        nodes {
          id
          fieldValues(first: 20) {
            nodes {
              ... on ProjectV2ItemFieldSingleSelectValue {
                field { ... on ProjectV2SingleSelectField { name } }
                name
              }
              ... on ProjectV2ItemFieldTextValue {
                field { ... on ProjectV2Field { name } }
                text
              }
              ... on ProjectV2ItemFieldDateValue {
                field { ... on ProjectV2Field { name } }
                date
              }
              ... on ProjectV2ItemFieldNumberValue {
                field { ... on ProjectV2Field { name } }
                number
              }
              ... on ProjectV2ItemFieldIterationValue {
                field { ... on ProjectV2IterationField { name } }
                title
              }
            }
          }
          content {
            ... on Issue {
              id
              number
              title
              body
              state
              stateReason
              assignees(first: 10) { nodes { login } }
              labels(first: 20) { nodes { name } }
              milestone { title }
              createdAt
              updatedAt
              closedAt
              repository { nameWithOwner }
            }
          }
        }
      }
    }
"""

# Project with items, owned by a user
GET_USER_PROJECT_ITEMS = (
    """
query GetUserProjectItems($owner: String!, $number: Int!, $cursor: String) {
  user(login: $owner) {"""
    + _PROJECT_BODY
    + """
  }
}
"""
)

# Project with items, owned by an organization
GET_ORG_PROJECT_ITEMS = (
    """
query GetOrgProjectItems($owner: String!, $number: Int!, $cursor: String) {
  organization(login: $owner) {"""
    + _PROJECT_BODY
    + """
  }
}
"""
)

# Milestones of a repository (open and closed)
GET_REPOSITORY_MILESTONES = """
query GetRepositoryMilestones($owner: String!, $name: String!, $cursor: String) {
  repository(owner: $owner, name: $name) {
    milestones(first: 100, after: $cursor, states: [OPEN, CLOSED]) {
      pageInfo {
        hasNextPage
        endCursor
      }
      nodes {
        id
        number
        title
        description
        dueOn
        state
        closedAt
        createdAt
        updatedAt
      }
    }
  }
}
"""

# Sub-issues and blocking issues of one issue
GET_ISSUE_RELATIONSHIPS = """
query GetIssueRelationships($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    issue(number: $number) {
      subIssues(first: 50) {
        nodes {
          number
          repository { nameWithOwner }
        }
      }
      blockedBy(first: 50) {
        nodes {
          number
          repository { nameWithOwner }
        }
      }
    }
  }
}
"""

# One page of comments on an issue
GET_ISSUE_COMMENTS = """
query GetIssueComments($owner: String!, $name: String!, $number: Int!, $cursor: String) {
  repository(owner: $owner, name: $name) {
    issue(number: $number) {
      comments(first: 100, after: $cursor) {
        pageInfo {
          hasNextPage
          endCursor
        }
        nodes {
          id
          author { login }
          body
          createdAt
          updatedAt
        }
      }
    }
  }
}
"""


def build_identity_lookup_query(user_count: int) -> str:
    """Build one query resolving repository, label, milestone and user IDs.

    Each assignee login becomes an aliased ``user`` lookup (``u0``, ``u1``...)
    bound to its own variable, so every identifier a batch of drafts needs is
    fetched in a single round trip.
    """
    user_vars = "".join(f", $u{i}: String!" for i in range(user_count))
    user_fields = "".join(
        f"\n  u{i}: user(login: $u{i}) {{\n    id\n    login\n  }}" for i in range(user_count)
    )
    return f"""
query LookupIdentities($owner: String!, $name: String!{user_vars}) {{
  repository(owner: $owner, name: $name) {{
    id
    labels(first: 100) {{
      nodes {{
        id
        name
      }}
    }}
    milestones(first: 100, states: OPEN) {{
      nodes {{
        id
        number
        title
      }}
    }}
  }}{user_fields}
}}
"""


# Mutation to create a new issue
CREATE_ISSUE = """
mutation CreateIssue(
  $repositoryId: ID!
  $title: String!
  $body: String
  $labelIds: [ID!]
  $milestoneId: ID
  $assigneeIds: [ID!]
) {
  createIssue(
    input: {
      repositoryId: $repositoryId
      title: $title
      body: $body
      labelIds: $labelIds
      milestoneId: $milestoneId
      assigneeIds: $assigneeIds
    }
  ) {
    issue {
      id
      number
    }
  }
}
"""

# Mutation to add an issue to a project
ADD_ITEM_TO_PROJECT = """
mutation AddItemToProject($projectId: ID!, $contentId: ID!) {
  addProjectV2ItemById(input: { projectId: $projectId, contentId: $contentId }) {
    item {
      id
    }
  }
}
"""

# Mutation to update an existing issue
UPDATE_ISSUE = """
mutation UpdateIssue($issueId: ID!, $title: String, $body: String) {
  updateIssue(input: { id: $issueId, title: $title, body: $body }) {
    issue {
      id
    }
  }
}
"""

# Mutation to close an issue
CLOSE_ISSUE = """
mutation CloseIssue($issueId: ID!) {
  closeIssue(input: { issueId: $issueId }) {
    issue {
      id
      state
    }
  }
}
"""

# Mutation to reopen an issue
REOPEN_ISSUE = """
mutation ReopenIssue($issueId: ID!) {
  reopenIssue(input: { issueId: $issueId }) {
    issue {
      id
      state
    }
  }
}
"""

# Mutation to update a project item's field value (date, single select, ...)
UPDATE_ITEM_FIELD = """
mutation UpdateItemField(
  $projectId: ID!
  $itemId: ID!
  $fieldId: ID!
  $value: ProjectV2FieldValue!
) {
  updateProjectV2ItemFieldValue(
    input: { projectId: $projectId, itemId: $itemId, fieldId: $fieldId, value: $value }
  ) {
    projectV2Item {
      id
    }
  }
}
"""

# Mutation to attach a sub-issue to its parent
ADD_SUB_ISSUE = """
mutation AddSubIssue($issueId: ID!, $subIssueId: ID!) {
  addSubIssue(input: { issueId: $issueId, subIssueId: $subIssueId }) {
    issue {
      id
    }
    subIssue {
      id
    }
  }
}
"""

# Mutation to detach a sub-issue from its parent
REMOVE_SUB_ISSUE = """
mutation RemoveSubIssue($issueId: ID!, $subIssueId: ID!) {
  removeSubIssue(input: { issueId: $issueId, subIssueId: $subIssueId }) {
    issue {
      id
    }
    subIssue {
      id
    }
  }
}
"""

# Mutation to mark an issue as blocked by another
ADD_BLOCKED_BY = """
mutation AddBlockedBy($issueId: ID!, $blockingIssueId: ID!) {
  addBlockedBy(input: { issueId: $issueId, blockingIssueId: $blockingIssueId }) {
    issue {
      id
    }
    blockingIssue {
      id
    }
  }
}
"""

# Mutation to remove a blocking relationship
REMOVE_BLOCKED_BY = """
mutation RemoveBlockedBy($issueId: ID!, $blockingIssueId: ID!) {
  removeBlockedBy(input: { issueId: $issueId, blockingIssueId: $blockingIssueId }) {
    issue {
      id
    }
    blockingIssue {
      id
    }
  }
}
"""
