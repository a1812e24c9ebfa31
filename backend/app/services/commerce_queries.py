"""
GraphQL documents for the commerce platform Admin API.

Every mutation selects its ``userErrors`` so the gateway can surface them.
"""

STAGED_UPLOADS_CREATE = """\
mutation stagedUploadsCreate($input: [StagedUploadInput!]!) {
  stagedUploadsCreate(input: $input) {
    stagedTargets {
      resourceUrl
      url
      parameters {
        name
        value
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

FILE_CREATE = """\
mutation fileCreate($files: [FileCreateInput!]!) {
  fileCreate(files: $files) {
    files {
      fileStatus
      createdAt
      ... on GenericFile {
        id
        url
      }
      ... on MediaImage {
        id
        image {
          id
          originalSrc: url
        }
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

METAFIELDS_SET = """\
mutation metafieldsSet($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields {
      key
      namespace
      value
      createdAt
      updatedAt
    }
    userErrors {
      field
      message
      code
    }
  }
}
"""

CUSTOMER_CREATE = """\
mutation customerCreate($input: CustomerInput!) {
  customerCreate(input: $input) {
    customer {
      id
      email
      phone
      firstName
      lastName
      metafields(first: 3) {
        edges {
          node {
            key
            namespace
            type
            value
          }
        }
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

CUSTOMER_GENERATE_ACTIVATION_URL = """\
mutation customerGenerateAccountActivationUrl($customerId: ID!) {
  customerGenerateAccountActivationUrl(customerId: $customerId) {
    accountActivationUrl
    userErrors {
      field
      message
    }
  }
}
"""
