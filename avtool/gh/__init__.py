"""GitHub GraphQL client, pull requests and repository, team, user and viewer queries."""