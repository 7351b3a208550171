"""A prefix-matching command registry and a help-text formatter."""