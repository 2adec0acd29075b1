"""
Workflow records

Only ownership matters to this service: workflows and their executions
follow a user through anonymous-to-real account linking.
"""
